"""Custom exceptions for the storefront."""
from __future__ import annotations


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class ValidationException(StorefrontException):
    """Input validation errors."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AuthRequiredException(StorefrontException):
    """A user-scoped action was attempted without an authenticated user."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Authentication required for {action}")
        self.action = action


class BackendException(StorefrontException):
    """Remote data store errors that escaped the result mapping."""

    pass
