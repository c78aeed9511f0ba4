"""FastAPI companion API over the storefront services."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.container import StorefrontContainer

from . import (
    routes_auth,
    routes_cart,
    routes_catalog,
    routes_checkout,
    routes_orders,
    routes_sewing,
    routes_wishlist,
)
from .common import set_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["storefront"])

router.include_router(routes_auth.router)
router.include_router(routes_catalog.router)
router.include_router(routes_cart.router)
router.include_router(routes_checkout.router)
router.include_router(routes_wishlist.router)
router.include_router(routes_sewing.router)
router.include_router(routes_orders.router)


def create_app(container: StorefrontContainer) -> FastAPI:
    """Create the API app bound to ``container``."""
    set_container(container)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Storefront API starting...")
        set_container(container)
        yield
        logger.info("Storefront API shutting down...")
        await container.shutdown()

    app = FastAPI(
        title="Dowslakers Storefront API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    if container.settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(container.settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "X-Cart-Id"],
        )

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "backend": container.settings.backend.kind,
            "storage": "redis" if container.storage.is_persistent else "memory",
        }

    app.include_router(router)
    return app


__all__ = ["create_app", "router", "set_container"]
