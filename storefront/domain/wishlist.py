"""Wishlist entry entity."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from storefront.core.utils import parse_timestamp


@dataclass(frozen=True)
class WishlistEntry:
    id: str
    product_id: str
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WishlistEntry:
        return cls(
            id=str(data["id"]),
            product_id=str(data["product_id"]),
            created_at=parse_timestamp(data.get("created_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
