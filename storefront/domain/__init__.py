"""Domain layer: storefront entities, results and the sewing order state machine."""
from storefront.domain.cart import CartLine
from storefront.domain.order import (
    DeliveryMethod,
    Order,
    OrderDetail,
    OrderItem,
    OrderStatus,
    OrderType,
    SizeOption,
)
from storefront.domain.product import Category, Product, SewingStyle
from storefront.domain.results import ErrorKey, Outcome, StoreError, StoreResult
from storefront.domain.user import User
from storefront.domain.wishlist import WishlistEntry

__all__ = [
    "CartLine",
    "Category",
    "DeliveryMethod",
    "ErrorKey",
    "Order",
    "OrderDetail",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "Outcome",
    "Product",
    "SewingStyle",
    "SizeOption",
    "StoreError",
    "StoreResult",
    "User",
    "WishlistEntry",
]
