"""Stateful storefront services shared by use cases and the API."""
