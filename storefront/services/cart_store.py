"""Persistent shopping cart."""
from __future__ import annotations

import json
import logging

from storefront.core.constants import CART_STORAGE_KEY
from storefront.core.exceptions import ValidationException
from storefront.core.order_math import calc_items_total, calc_quantity
from storefront.domain.cart import CartLine
from storefront.domain.product import Product
from storefront.integrations.local_storage import LocalStorage

logger = logging.getLogger(__name__)


class CartStore:
    """Cart lines keyed by ``(product id, size)``.

    The whole collection is written to local storage after every mutation and
    restored on construction. A payload that cannot be restored is dropped and
    the cart starts empty.
    """

    def __init__(self, storage: LocalStorage, storage_key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._storage_key = storage_key
        self._lines: list[CartLine] = self._load()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @property
    def items(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def total_items(self) -> int:
        return calc_quantity(self._lines)

    @property
    def total_amount(self) -> float:
        return calc_items_total(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get_line(self, product_id: str, size: str) -> CartLine | None:
        for line in self._lines:
            if line.matches(product_id, size):
                return line
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_item(self, product: Product, size: str, quantity: int = 1) -> CartLine:
        """Add ``quantity`` of ``product`` in ``size``, merging with an existing line."""
        if quantity < 1:
            raise ValidationException("Quantity must be at least 1", field="quantity")
        line = self.get_line(product.id, size)
        if line is not None:
            line.quantity += quantity
        else:
            line = CartLine(product=product, size=size, quantity=quantity)
            self._lines.append(line)
        logger.info(f"Cart add: product={product.id} size={size} qty={line.quantity}")
        self._save()
        return line

    def remove_item(self, product_id: str, size: str) -> None:
        before = len(self._lines)
        self._lines = [line for line in self._lines if not line.matches(product_id, size)]
        if len(self._lines) != before:
            logger.info(f"Cart remove: product={product_id} size={size}")
            self._save()

    def update_quantity(self, product_id: str, size: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id, size)
            return
        line = self.get_line(product_id, size)
        if line is None:
            return
        line.quantity = quantity
        self._save()

    def clear_cart(self) -> None:
        self._lines = []
        logger.info("Cart cleared")
        self._save()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _save(self) -> None:
        payload = json.dumps([line.to_dict() for line in self._lines])
        self._storage.set(self._storage_key, payload)

    def _load(self) -> list[CartLine]:
        raw = self._storage.get(self._storage_key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("cart payload is not a list")
            return [CartLine.from_dict(item) for item in data]
        except Exception as e:
            logger.warning(f"Discarding unreadable cart payload: {e}")
            self._storage.remove(self._storage_key)
            return []
