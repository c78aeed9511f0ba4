"""Cart line entity."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from storefront.domain.product import Product


@dataclass
class CartLine:
    """One (product, size) pairing with a quantity."""

    product: Product
    size: str
    quantity: int

    @property
    def key(self) -> tuple[str, str]:
        return (self.product.id, self.size)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity

    def matches(self, product_id: str, size: str) -> bool:
        return self.product.id == str(product_id) and self.size == size

    def to_dict(self) -> dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "size": self.size,
            "quantity": int(self.quantity),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLine:
        """Strict parse used when restoring a persisted cart."""
        quantity = int(data["quantity"])
        if quantity < 1:
            raise ValueError(f"Cart line quantity must be positive, got {quantity}")
        return cls(
            product=Product.from_dict(data["product"]),
            size=str(data["size"]),
            quantity=quantity,
        )
