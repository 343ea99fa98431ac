"""
Catalog use cases: product lookups, search, filtering, categories and the
staff-only product maintenance actions.
"""

from __future__ import annotations

import logging
from typing import Optional

from storefront.db.models import Category, Product
from storefront.domain import catalog as rules
from storefront.repositories.catalog_seed import product_columns, seed_catalog
from storefront.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception for catalog workflows."""


class ProductNotFoundError(CatalogError):
    """Raised when a product id does not exist."""


class CategoryNotFoundError(CatalogError):
    """Raised when a category slug does not exist."""


class InvalidQueryError(CatalogError):
    """Raised when a search is attempted without a query."""


def product_to_dict(entity: Product) -> dict:
    return {
        "id": entity.id,
        "name": entity.name,
        "description": entity.description,
        "fullDescription": entity.full_description,
        "category": entity.category,
        "brand": entity.brand or "",
        "price": float(entity.price),
        "originalPrice": float(entity.original_price) if entity.original_price is not None else None,
        "rating": float(entity.rating or 0),
        "reviews": int(entity.reviews or 0),
        "image": entity.image,
        "additionalImages": list(entity.additional_images or []),
        "specifications": dict(entity.specifications or {}),
        "badge": entity.badge,
        "sku": entity.sku,
        "warranty": entity.warranty,
        "inStock": bool(entity.in_stock),
        "featured": bool(entity.featured),
        "new": bool(entity.is_new),
        "discount": entity.discount,
    }


def category_to_dict(entity: Category, product_count: int = 0) -> dict:
    return {
        "id": entity.id,
        "name": entity.name,
        "slug": entity.slug,
        "description": entity.description,
        "image": entity.image,
        "icon": entity.icon,
        "productCount": product_count,
    }


class CatalogService:
    """Read side of the catalog plus product maintenance."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def _all(self) -> list[dict]:
        return [product_to_dict(p) for p in self.repository.list_products()]

    # -------------------------- browsing --------------------------
    def list_products(self) -> list[dict]:
        return self._all()

    def get_product(self, product_id: int) -> dict:
        entity = self.repository.get_product(product_id)
        if not entity:
            raise ProductNotFoundError("Product not found")
        return product_to_dict(entity)

    def list_category_names(self) -> list[str]:
        return rules.distinct_categories(self._all())

    def products_by_category(self, slug: str) -> list[dict]:
        return [p for p in self._all() if rules.matches_category(p["category"], slug)]

    def search(self, query: Optional[str]) -> list[dict]:
        if not query:
            raise InvalidQueryError("Search query is required")
        return [p for p in self._all() if rules.matches_query(p, query)]

    def featured(self) -> list[dict]:
        return [p for p in self._all() if p["featured"]]

    def discounted(self) -> list[dict]:
        return rules.discounted(self._all())

    def new_arrivals(self) -> list[dict]:
        return [p for p in self._all() if p["new"]]

    def similar(self, product_id: int, limit: int = rules.SIMILAR_DEFAULT_LIMIT) -> list[dict]:
        return rules.similar(self._all(), product_id, limit)

    def filter(self, options: rules.FilterOptions) -> dict:
        everything = self._all()
        products = rules.filter_products(everything, options)
        low, high = rules.price_bounds(everything)
        brands = sorted({p["brand"] for p in everything if p["brand"]})
        return {
            "products": products,
            "total": len(products),
            "brands": brands,
            "priceRange": {"min": low, "max": high},
        }

    # -------------------------- categories --------------------------
    def list_category_details(self) -> list[dict]:
        products = self._all()
        result = []
        for category in self.repository.list_categories():
            count = sum(1 for p in products if rules.matches_category(p["category"], category.slug))
            result.append(category_to_dict(category, count))
        return result

    def get_category(self, slug: str) -> dict:
        entity = self.repository.get_category_by_slug(slug)
        if not entity:
            raise CategoryNotFoundError("Category not found")
        count = len(self.products_by_category(entity.slug))
        return category_to_dict(entity, count)

    # -------------------------- maintenance --------------------------
    def _prepare(self, payload: dict) -> dict:
        values = product_columns(payload)
        if not (values.get("brand") or "").strip():
            values["brand"] = rules.default_brand_for_category(values.get("category"))
        return values

    def create_product(self, payload: dict) -> dict:
        values = self._prepare(payload)
        values["id"] = self.repository.next_product_id()
        entity = self.repository.create_product(values)
        logger.info("Created product %s (%s)", entity.id, entity.name)
        return product_to_dict(entity)

    def update_product(self, product_id: int, payload: dict) -> dict:
        values = self._prepare(payload)
        values.pop("id", None)
        entity = self.repository.update_product(product_id, values)
        if not entity:
            raise ProductNotFoundError("Product not found")
        return product_to_dict(entity)

    def delete_product(self, product_id: int) -> None:
        if not self.repository.delete_product(product_id):
            raise ProductNotFoundError("Product not found")
        logger.info("Deleted product %s", product_id)

    def reset_catalog(self) -> int:
        counts = seed_catalog(self.repository, force=True)
        return counts["products"]
