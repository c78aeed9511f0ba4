"""Authenticated user identity."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"


@dataclass(frozen=True)
class User:
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str = ROLE_CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data["id"]),
            email=str(data.get("email", "")),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            role=str(data.get("role") or ROLE_CUSTOMER),
        )
