"""Catalog entities: products, categories and sewing styles."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from storefront.core.utils import parse_price


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item is not None]


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass
class Product:
    """Product snapshot as returned by the catalog."""

    id: str
    name: str
    price: float
    description: str | None = None
    images: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    stock_quantity: int | None = None
    category_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "images": list(self.images),
            "sizes": list(self.sizes),
            "stock_quantity": self.stock_quantity,
            "category_id": self.category_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Product:
        """Build from a catalog row; raises KeyError when ``id`` is missing."""
        stock = data.get("stock_quantity")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=parse_price(data.get("price")),
            description=data.get("description"),
            images=_str_list(data.get("images")),
            sizes=_str_list(data.get("sizes")),
            stock_quantity=int(stock) if stock is not None else None,
            category_id=_optional_str(data.get("category_id")),
        )

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None

    def offers_size(self, size: str) -> bool:
        # Products without a size list are one-size
        return not self.sizes or size in self.sizes


@dataclass
class Category:
    id: str
    name: str
    slug: str | None = None
    description: str | None = None
    image: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            slug=data.get("slug"),
            description=data.get("description"),
            image=data.get("image"),
        )


@dataclass
class SewingStyle:
    id: str
    name: str
    description: str | None = None
    images: list[str] = field(default_factory=list)
    category_id: str | None = None
    base_price: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SewingStyle:
        images = data.get("images")
        if not images and data.get("image"):
            images = [data["image"]]
        price = data.get("base_price", data.get("price"))
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            description=data.get("description"),
            images=_str_list(images),
            category_id=_optional_str(data.get("category_id")),
            base_price=parse_price(price) if price is not None else None,
        )
