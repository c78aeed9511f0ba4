"""Order domain types and status enums."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from storefront.core.utils import parse_price, parse_timestamp


class OrderType:
    """What the order is for."""

    PRODUCT = "product"
    SEWING = "sewing"


class DeliveryMethod:
    """How a ready-made order is fulfilled."""

    DELIVERY = "delivery"
    PICKUP = "pickup"

    ALL = (DELIVERY, PICKUP)

    @classmethod
    def normalize(cls, method: str | None) -> str:
        value = str(method or "").strip().lower()
        return cls.PICKUP if value == cls.PICKUP else cls.DELIVERY


class SizeOption:
    """Sizing mode of a custom sewing request."""

    STANDARD = "standard"
    CUSTOM = "custom"

    ALL = (STANDARD, CUSTOM)


class OrderStatus:
    """Order lifecycle statuses as stored upstream."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    LABELS = {
        PENDING: "Pending",
        PROCESSING: "Processing",
        SHIPPED: "Shipped",
        DELIVERED: "Delivered",
        CANCELLED: "Cancelled",
    }

    @classmethod
    def normalize(cls, status: str | None) -> str:
        if not status:
            return cls.PENDING
        return str(status).strip().lower()

    @classmethod
    def label(cls, status: str | None) -> str:
        normalized = cls.normalize(status)
        return cls.LABELS.get(normalized, normalized.replace("_", " ").title())


@dataclass
class OrderItem:
    """Single product line of a ready-made order."""

    product_id: str
    quantity: int
    size: str | None
    price: float
    order_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "product_id": self.product_id,
            "quantity": int(self.quantity),
            "size": self.size,
            "price": self.price,
        }
        if self.order_id is not None:
            payload["order_id"] = self.order_id
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderItem:
        order_id = data.get("order_id")
        return cls(
            product_id=str(data["product_id"]),
            quantity=int(data.get("quantity") or 1),
            size=data.get("size"),
            price=parse_price(data.get("price")),
            order_id=str(order_id) if order_id is not None else None,
        )


@dataclass
class Order:
    id: str
    user_id: str | None
    order_type: str = OrderType.PRODUCT
    status: str = OrderStatus.PENDING
    total_amount: float | None = None
    delivery_method: str | None = None
    delivery_address: str | None = None
    delivery_contact: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    items: list[OrderItem] = field(default_factory=list)
    details: list[OrderDetail] = field(default_factory=list)

    @property
    def status_label(self) -> str:
        return OrderStatus.label(self.status)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order:
        total = data.get("total_amount")
        user_id = data.get("user_id")
        raw_items = data.get("items") or data.get("order_items") or []
        raw_details = data.get("details") or data.get("sewing_order_details") or []
        if isinstance(raw_details, dict):
            raw_details = [raw_details]
        return cls(
            id=str(data["id"]),
            user_id=str(user_id) if user_id is not None else None,
            order_type=str(data.get("order_type") or OrderType.PRODUCT),
            status=OrderStatus.normalize(data.get("status")),
            total_amount=parse_price(total) if total is not None else None,
            delivery_method=data.get("delivery_method"),
            delivery_address=data.get("delivery_address"),
            delivery_contact=data.get("delivery_contact"),
            notes=data.get("notes"),
            created_at=parse_timestamp(data.get("created_at")),
            items=[OrderItem.from_dict(item) for item in raw_items if isinstance(item, dict)],
            details=[
                OrderDetail.from_dict(detail) for detail in raw_details if isinstance(detail, dict)
            ],
        )


@dataclass
class OrderDetail:
    """Custom sewing attributes attached to an order after creation."""

    id: str
    order_id: str
    sewing_style_id: str | None
    size_option: str | None
    measurements: dict[str, str] | None = None
    special_instructions: str | None = None
    created_at: datetime | None = None
    sewing_style_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderDetail:
        style_id = data.get("sewing_style_id")
        measurements = data.get("measurements")
        style = data.get("sewing_style") or data.get("sewing_styles")
        style_name = data.get("sewing_style_name")
        if style_name is None and isinstance(style, dict):
            style_name = style.get("name")
        return cls(
            id=str(data["id"]),
            order_id=str(data["order_id"]),
            sewing_style_id=str(style_id) if style_id is not None else None,
            size_option=data.get("size_option"),
            measurements=(
                {str(k): str(v) for k, v in measurements.items()}
                if isinstance(measurements, dict)
                else None
            ),
            special_instructions=data.get("special_instructions"),
            created_at=parse_timestamp(data.get("created_at")),
            sewing_style_name=str(style_name) if style_name is not None else None,
        )
