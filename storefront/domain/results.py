"""Result types returned across the backend boundary and by use cases.

Backends resolve remote failures once into :class:`StoreResult`; services and
use cases translate those into :class:`Outcome` values whose ``error_key``
tells callers which message to show.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class StoreError:
    """Failure kinds a remote store call can resolve to."""

    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    ok: bool
    value: T | None = None
    error: str | None = None
    detail: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> StoreResult[T]:
        return cls(True, value=value)

    @classmethod
    def duplicate(cls, detail: str | None = None) -> StoreResult[T]:
        return cls(False, error=StoreError.DUPLICATE, detail=detail)

    @classmethod
    def not_found(cls, detail: str | None = None) -> StoreResult[T]:
        return cls(False, error=StoreError.NOT_FOUND, detail=detail)

    @classmethod
    def unauthorized(cls, detail: str | None = None) -> StoreResult[T]:
        return cls(False, error=StoreError.UNAUTHORIZED, detail=detail)

    @classmethod
    def transient(cls, detail: str | None = None) -> StoreResult[T]:
        return cls(False, error=StoreError.TRANSIENT, detail=detail)

    @property
    def is_duplicate(self) -> bool:
        return self.error == StoreError.DUPLICATE

    @property
    def is_not_found(self) -> bool:
        return self.error == StoreError.NOT_FOUND

    @property
    def is_unauthorized(self) -> bool:
        return self.error == StoreError.UNAUTHORIZED


class ErrorKey:
    """User-facing failure categories of workflow outcomes."""

    VALIDATION = "validation"
    AUTH_REQUIRED = "auth_required"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    BUSY = "busy"


@dataclass
class Outcome:
    """Settled result of a user-scoped workflow action."""

    ok: bool
    error_key: str | None = None
    value: Any | None = None
    field: str | None = None
    message: str | None = None
    partial: bool = False

    @classmethod
    def success(cls, value: Any | None = None) -> Outcome:
        return cls(True, value=value)

    @classmethod
    def validation(cls, message: str, field: str | None = None) -> Outcome:
        return cls(False, ErrorKey.VALIDATION, field=field, message=message)

    @classmethod
    def auth_required(cls) -> Outcome:
        return cls(False, ErrorKey.AUTH_REQUIRED, message="Please sign in to continue.")

    @classmethod
    def duplicate(cls, message: str) -> Outcome:
        return cls(False, ErrorKey.DUPLICATE, message=message)

    @classmethod
    def not_found(cls, message: str) -> Outcome:
        return cls(False, ErrorKey.NOT_FOUND, message=message)

    @classmethod
    def failed(cls, message: str, *, value: Any | None = None, partial: bool = False) -> Outcome:
        return cls(False, ErrorKey.FAILED, value=value, message=message, partial=partial)

    @classmethod
    def busy(cls) -> Outcome:
        return cls(False, ErrorKey.BUSY, message="Another request is still in progress.")
