from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.container import StorefrontContainer
from storefront.core.exceptions import BackendException

from .common import ProductResponse, get_container

router = APIRouter()


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    category: str | None = Query(None, description="Category slug"),
    container: StorefrontContainer = Depends(get_container),
):
    try:
        products = await container.catalog.fetch_products(category)
    except BackendException as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    return [ProductResponse.from_product(product) for product in products]


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, container: StorefrontContainer = Depends(get_container)):
    try:
        product = await container.catalog.fetch_product(product_id)
    except BackendException as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductResponse.from_product(product)


@router.get("/categories")
async def list_categories(container: StorefrontContainer = Depends(get_container)):
    try:
        categories = await container.catalog.fetch_categories()
    except BackendException as e:
        raise HTTPException(status_code=502, detail=e.message) from e
    return [
        {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "image": category.image,
        }
        for category in categories
    ]
