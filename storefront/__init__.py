"""Dowslakers storefront core: cart, wishlist, checkout and custom sewing orders."""

__version__ = "1.0.0"
