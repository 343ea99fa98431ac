from fastapi import APIRouter, HTTPException

from storefront.services.catalog_service import CatalogService, CategoryNotFoundError

router = APIRouter(prefix="/api/categories", tags=["categories"])
catalog = CatalogService()


@router.get("")
def list_categories():
    return catalog.list_category_names()


@router.get("/details")
def category_details():
    return catalog.list_category_details()


@router.get("/{slug}")
def get_category(slug: str):
    try:
        return catalog.get_category(slug)
    except CategoryNotFoundError as exc:
        raise HTTPException(404, str(exc))
