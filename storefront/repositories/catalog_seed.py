"""
Bundled catalog seed (products, categories, articles).

The JSON file ships with the package and fills empty tables on startup, and
backs the admin "reset catalog" action.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
import json
import logging

from storefront.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "catalog.json"

_PRODUCT_FIELDS = {
    "id": "id",
    "name": "name",
    "description": "description",
    "fullDescription": "full_description",
    "category": "category",
    "brand": "brand",
    "price": "price",
    "originalPrice": "original_price",
    "rating": "rating",
    "reviews": "reviews",
    "image": "image",
    "additionalImages": "additional_images",
    "specifications": "specifications",
    "badge": "badge",
    "sku": "sku",
    "warranty": "warranty",
    "inStock": "in_stock",
    "featured": "featured",
    "new": "is_new",
    "discount": "discount",
}


def load(path: Path | None = None) -> dict:
    source = path or DATA_FILE
    if source.exists():
        with source.open("r", encoding="utf-8") as f:
            return seed_defaults(json.load(f))
    return seed_defaults({})


def seed_defaults(data: dict) -> dict:
    data.setdefault("products", [])
    data.setdefault("categories", [])
    data.setdefault("articles", [])
    return data


def product_columns(record: dict) -> dict:
    """Map an API-shaped product record onto Product column names."""
    values = {column: record[key] for key, column in _PRODUCT_FIELDS.items() if key in record}
    values.setdefault("additional_images", [])
    values.setdefault("specifications", {})
    values.setdefault("in_stock", True)
    values.setdefault("featured", False)
    values.setdefault("is_new", False)
    values.setdefault("brand", "")
    return values


def article_columns(record: dict) -> dict:
    return {
        "id": record.get("id"),
        "title": record["title"],
        "summary": record["summary"],
        "content": record.get("content", ""),
        "category": record["category"],
        "published_on": date.fromisoformat(record["publishedOn"]),
        "image": record["image"],
    }


def seed_catalog(repo: SQLRepository | None = None, *, data: dict | None = None, force: bool = False) -> dict:
    """Insert the bundled catalog into empty tables. Returns inserted counts."""
    repo = repo or SQLRepository()
    data = data or load()
    counts = {"products": 0, "categories": 0, "articles": 0}
    if force or repo.count_products() == 0:
        counts["products"] = repo.replace_products(product_columns(p) for p in data["products"])
    if repo.count_categories() == 0:
        for record in data["categories"]:
            repo.create_category(
                {
                    "name": record["name"],
                    "slug": record["slug"],
                    "description": record.get("description", ""),
                    "image": record.get("image", ""),
                    "icon": record.get("icon"),
                }
            )
            counts["categories"] += 1
    if repo.count_articles() == 0:
        for record in data["articles"]:
            repo.create_article(article_columns(record))
            counts["articles"] += 1
    if any(counts.values()):
        logger.info("Seeded catalog: %s", counts)
    return counts
