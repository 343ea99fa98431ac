from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from storefront.domain.catalog import SIMILAR_DEFAULT_LIMIT, FilterOptions
from storefront.routers.deps import parse_id
from storefront.services.catalog_service import (
    CatalogService,
    InvalidQueryError,
    ProductNotFoundError,
)

router = APIRouter(prefix="/api/products", tags=["products"])
catalog = CatalogService()


# Static paths first: "/search" must never be read as a product id.
@router.get("")
def list_products():
    return catalog.list_products()


@router.get("/search")
def search_products(q: Optional[str] = None):
    try:
        return catalog.search(q)
    except InvalidQueryError as exc:
        raise HTTPException(400, str(exc))


@router.get("/featured")
def featured_products():
    return catalog.featured()


@router.get("/discounted")
def discounted_products():
    return catalog.discounted()


@router.get("/new")
def new_products():
    return catalog.new_arrivals()


@router.get("/filter")
def filter_products(
    category: Optional[str] = None,
    brand: Optional[str] = None,
    brands: Optional[list[str]] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    q: Optional[str] = None,
):
    options = FilterOptions(
        category=category,
        brand=brand,
        brands=[b for b in brands or [] if b],
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        search_term=q,
    )
    return catalog.filter(options)


@router.get("/category/{slug}")
def products_by_category(slug: str):
    return catalog.products_by_category(slug)


@router.get("/{product_id}")
def get_product(product_id: str):
    pid = parse_id(product_id, "Product not found")
    try:
        return catalog.get_product(pid)
    except ProductNotFoundError as exc:
        raise HTTPException(404, str(exc))


@router.get("/{product_id}/similar")
def similar_products(product_id: str, limit: int = Query(SIMILAR_DEFAULT_LIMIT, ge=0, le=50)):
    try:
        pid = int(product_id)
    except ValueError:
        return []
    return catalog.similar(pid, limit)
