"""Environment-driven configuration objects for the storefront."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from storefront.core.constants import (
    CART_STORAGE_KEY,
    DEFAULT_API_URL,
    DEFAULT_DELIVERY_FEE,
    HTTP_TIMEOUT_SECONDS,
)
from storefront.core.exceptions import ConfigurationException

BACKEND_REST = "rest"
BACKEND_POSTGRES = "postgres"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True, slots=True)
class BackendConfig:
    kind: str
    api_url: str
    database_url: str | None
    timeout_seconds: float


@dataclass(frozen=True, slots=True)
class Settings:
    backend: BackendConfig
    redis_url: str | None
    cart_storage_key: str
    delivery_fee: int
    environment: str
    log_level: str
    sentry_dsn: str | None
    cors_origins: tuple[str, ...] = ()
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def api_url(self) -> str:
        """Shortcut for the REST base URL."""
        return self.backend.api_url


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    kind = os.getenv("BACKEND", BACKEND_REST).strip().lower()
    if kind not in (BACKEND_REST, BACKEND_POSTGRES):
        raise ConfigurationException(f"Unsupported BACKEND: {kind}")

    database_url = os.getenv("DATABASE_URL")
    if kind == BACKEND_POSTGRES and not database_url:
        raise ConfigurationException("BACKEND=postgres requires DATABASE_URL")

    backend = BackendConfig(
        kind=kind,
        api_url=os.getenv("API_URL", DEFAULT_API_URL).rstrip("/"),
        database_url=database_url,
        timeout_seconds=_float_env("HTTP_TIMEOUT_SECONDS", HTTP_TIMEOUT_SECONDS),
    )

    delivery_fee = _int_env("DELIVERY_FEE", DEFAULT_DELIVERY_FEE)
    if delivery_fee < 0:
        raise ConfigurationException("DELIVERY_FEE must not be negative")

    return Settings(
        backend=backend,
        redis_url=os.getenv("REDIS_URL") or None,
        cart_storage_key=os.getenv("CART_STORAGE_KEY", CART_STORAGE_KEY),
        delivery_fee=delivery_fee,
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        cors_origins=tuple(
            origin.strip().rstrip("/")
            for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
            if origin.strip()
        ),
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=_int_env("PORT", 8000),
    )
