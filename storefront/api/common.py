from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel, Field

from storefront.container import StorefrontContainer, Visitor
from storefront.core.formatting import format_price
from storefront.domain.cart import CartLine
from storefront.domain.order import DeliveryMethod, Order, OrderDetail, OrderItem
from storefront.domain.product import Product, SewingStyle
from storefront.domain.results import ErrorKey, Outcome
from storefront.domain.user import User
from storefront.domain.wishlist import WishlistEntry
from storefront.services.cart_store import CartStore
from storefront.services.session import AuthResult

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models
# =============================================================================


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    price_display: str
    description: str | None = None
    images: list[str] = []
    sizes: list[str] = []
    stock_quantity: int | None = None
    category_id: str | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductResponse:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            price_display=format_price(product.price),
            description=product.description,
            images=product.images,
            sizes=product.sizes,
            stock_quantity=product.stock_quantity,
            category_id=product.category_id,
        )


class CartLineResponse(BaseModel):
    product: ProductResponse
    size: str
    quantity: int
    line_total: float


class CartResponse(BaseModel):
    items: list[CartLineResponse]
    total_items: int
    total_amount: float
    total_display: str


class AddCartItemRequest(BaseModel):
    product_id: str
    size: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    product_id: str
    size: str
    quantity: int


class CheckoutTotalResponse(BaseModel):
    delivery_method: str
    subtotal: float
    shipping_fee: float
    grand_total: float
    grand_total_display: str


class CheckoutRequest(BaseModel):
    full_name: str = ""
    phone: str = ""
    email: str = ""
    delivery_method: str = DeliveryMethod.DELIVERY
    delivery_address: str = ""
    notes: str = ""


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    size: str | None = None
    price: float

    @classmethod
    def from_item(cls, item: OrderItem) -> OrderItemResponse:
        return cls(
            product_id=item.product_id, quantity=item.quantity, size=item.size, price=item.price
        )


class OrderDetailResponse(BaseModel):
    id: str
    sewing_style_id: str | None = None
    sewing_style_name: str | None = None
    size_option: str | None = None
    measurements: dict[str, str] | None = None
    special_instructions: str | None = None

    @classmethod
    def from_detail(cls, detail: OrderDetail) -> OrderDetailResponse:
        return cls(
            id=detail.id,
            sewing_style_id=detail.sewing_style_id,
            sewing_style_name=detail.sewing_style_name,
            size_option=detail.size_option,
            measurements=detail.measurements,
            special_instructions=detail.special_instructions,
        )


class OrderResponse(BaseModel):
    id: str
    order_type: str
    status: str
    status_label: str
    total_amount: float | None = None
    delivery_method: str | None = None
    delivery_address: str | None = None
    delivery_contact: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    items: list[OrderItemResponse] = []
    details: list[OrderDetailResponse] = []

    @classmethod
    def from_order(cls, order: Order) -> OrderResponse:
        return cls(
            id=order.id,
            order_type=order.order_type,
            status=order.status,
            status_label=order.status_label,
            total_amount=order.total_amount,
            delivery_method=order.delivery_method,
            delivery_address=order.delivery_address,
            delivery_contact=order.delivery_contact,
            notes=order.notes,
            created_at=order.created_at,
            items=[OrderItemResponse.from_item(item) for item in order.items],
            details=[OrderDetailResponse.from_detail(detail) for detail in order.details],
        )


class WishlistRequest(BaseModel):
    product_id: str


class WishlistEntryResponse(BaseModel):
    id: str
    product_id: str
    created_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry: WishlistEntry) -> WishlistEntryResponse:
        return cls(id=entry.id, product_id=entry.product_id, created_at=entry.created_at)


class SewingStyleResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    images: list[str] = []
    category_id: str | None = None
    base_price: float | None = None

    @classmethod
    def from_style(cls, style: SewingStyle) -> SewingStyleResponse:
        return cls(
            id=style.id,
            name=style.name,
            description=style.description,
            images=style.images,
            category_id=style.category_id,
            base_price=style.base_price,
        )


class CustomOrderRequest(BaseModel):
    sewing_style_id: str
    size_option: str = "standard"
    selected_size: str = "M"
    measurements: dict[str, str] = {}
    special_instructions: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(LoginRequest):
    first_name: str = ""
    last_name: str = ""


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    is_admin: bool

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            is_admin=user.is_admin,
        )


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


def cart_response(lines: list[CartLine], total_items: int, total_amount: float) -> CartResponse:
    return CartResponse(
        items=[
            CartLineResponse(
                product=ProductResponse.from_product(line.product),
                size=line.size,
                quantity=line.quantity,
                line_total=line.line_total,
            )
            for line in lines
        ],
        total_items=total_items,
        total_amount=total_amount,
        total_display=format_price(total_amount),
    )


# =============================================================================
# Outcome -> HTTP
# =============================================================================

OUTCOME_STATUS = {
    ErrorKey.VALIDATION: 422,
    ErrorKey.AUTH_REQUIRED: 401,
    ErrorKey.DUPLICATE: 409,
    ErrorKey.NOT_FOUND: 404,
    ErrorKey.BUSY: 429,
    ErrorKey.FAILED: 502,
}


def raise_for_outcome(outcome: Outcome) -> None:
    """Raise the HTTP error matching a failed outcome; no-op on success."""
    if outcome.ok:
        return
    detail: dict[str, Any] = {"error": outcome.error_key, "message": outcome.message}
    if outcome.field:
        detail["field"] = outcome.field
    if outcome.partial:
        detail["partial"] = True
        order = outcome.value
        if isinstance(order, Order):
            detail["order_id"] = order.id
    raise HTTPException(status_code=OUTCOME_STATUS.get(outcome.error_key, 500), detail=detail)


# =============================================================================
# Container dependency (injected from create_app)
# =============================================================================

_container: StorefrontContainer | None = None


def set_container(container: StorefrontContainer | None) -> None:
    """Set the services container used by API routes."""
    global _container
    _container = container


def get_container() -> StorefrontContainer:
    if _container is None:
        raise HTTPException(status_code=500, detail="Storefront not initialized")
    return _container


# =============================================================================
# Caller identity
# =============================================================================

CART_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Expected a Bearer token")
    return token.strip()


async def get_visitor(
    authorization: str | None = Header(None),
    x_cart_id: str | None = Header(None, alias="X-Cart-Id"),
    container: StorefrontContainer = Depends(get_container),
) -> Visitor:
    """Services scoped to the caller, signed in when a valid bearer token is sent."""
    if x_cart_id is not None and not CART_ID_PATTERN.match(x_cart_id):
        raise HTTPException(status_code=400, detail="Invalid X-Cart-Id header")

    visitor = container.open_visitor(cart_id=x_cart_id)
    token = _bearer_token(authorization)
    if token is None:
        return visitor

    result = await visitor.session.resume(token)
    if visitor.session.is_authenticated:
        return visitor
    if result.ok or result.is_unauthorized or result.is_not_found:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    logger.warning(f"Could not verify bearer token: {result.detail}")
    raise HTTPException(status_code=502, detail="Could not verify the session")


def get_cart(
    visitor: Visitor = Depends(get_visitor),
    container: StorefrontContainer = Depends(get_container),
) -> CartStore:
    """Cart of the caller's browsing session (``X-Cart-Id``) or of the signed-in user."""
    owner = visitor.cart_owner
    if owner is None:
        raise HTTPException(
            status_code=400, detail="Send an X-Cart-Id header or sign in to use a cart"
        )
    return container.cart_for(owner)


def raise_for_auth(result: AuthResult) -> None:
    """HTTP error for a failed sign-in or sign-up."""
    if result.ok:
        return
    status = OUTCOME_STATUS.get(result.error_key or ErrorKey.FAILED, 502)
    raise HTTPException(
        status_code=status, detail={"error": result.error_key, "message": result.error}
    )


__all__ = [
    "logger",
    "AddCartItemRequest",
    "AuthResponse",
    "CartResponse",
    "CheckoutRequest",
    "CheckoutTotalResponse",
    "CustomOrderRequest",
    "LoginRequest",
    "OrderResponse",
    "ProductResponse",
    "RegisterRequest",
    "SewingStyleResponse",
    "UpdateCartItemRequest",
    "UserResponse",
    "WishlistEntryResponse",
    "WishlistRequest",
    "cart_response",
    "get_cart",
    "get_container",
    "get_visitor",
    "raise_for_auth",
    "raise_for_outcome",
    "set_container",
]
