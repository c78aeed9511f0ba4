"""Read-only catalog access."""
from __future__ import annotations

import logging

from storefront.core.exceptions import BackendException
from storefront.domain.product import Category, Product, SewingStyle
from storefront.domain.results import StoreResult
from storefront.integrations.backend import CatalogReader

logger = logging.getLogger(__name__)


class CatalogService:
    """Products, categories and sewing styles.

    Listing failures raise :class:`BackendException`; a missing product is
    reported as ``None``.
    """

    def __init__(self, catalog: CatalogReader):
        self._catalog = catalog

    @staticmethod
    def _unwrap(result: StoreResult, what: str):
        if not result.ok:
            logger.error(f"Failed to fetch {what}: {result.error} ({result.detail})")
            raise BackendException(f"Could not load {what}")
        return result.value or []

    async def fetch_products(self, category: str | None = None) -> list[Product]:
        return self._unwrap(await self._catalog.fetch_products(category), "products")

    async def fetch_product(self, product_id: str) -> Product | None:
        result = await self._catalog.fetch_product(str(product_id))
        if result.is_not_found:
            return None
        if not result.ok:
            logger.error(f"Failed to fetch product {product_id}: {result.detail}")
            raise BackendException("Could not load product")
        return result.value

    async def fetch_categories(self) -> list[Category]:
        return self._unwrap(await self._catalog.fetch_categories(), "categories")

    async def fetch_sewing_styles(self, category_id: str | None = None) -> list[SewingStyle]:
        styles = self._unwrap(await self._catalog.fetch_sewing_styles(), "sewing styles")
        if category_id:
            styles = [style for style in styles if style.category_id == str(category_id)]
        return styles

    async def fetch_sewing_style(self, style_id: str) -> SewingStyle | None:
        for style in await self.fetch_sewing_styles():
            if style.id == str(style_id):
                return style
        return None
