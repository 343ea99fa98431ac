"""Catalog rules: matching, filtering and sorting of product records.

Product records are the dicts produced by the catalog service (camelCase keys,
as served by the API). Every function here is pure and keeps the relative
order of its input unless it explicitly sorts.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from storefront.core.utils import slugify

SORT_FEATURED = "featured"
SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"
SORT_RATING = "rating"
SORT_DEALS = "deals"

SIMILAR_DEFAULT_LIMIT = 4

BRANDS_BY_CATEGORY = {
    "GPUs": ["NVIDIA", "AMD", "ASUS", "MSI", "Gigabyte", "EVGA"],
    "CPUs": ["Intel", "AMD"],
    "Storage": ["Samsung", "WD", "Seagate", "Crucial", "Kingston"],
    "Memory": ["Corsair", "G.Skill", "Kingston", "Crucial"],
    "Motherboards": ["ASUS", "MSI", "Gigabyte", "ASRock"],
    "Cooling": ["Cooler Master", "NZXT", "Corsair", "be quiet!"],
    "Power Supplies": ["EVGA", "Corsair", "Seasonic", "be quiet!"],
    "Cases": ["Lian Li", "Corsair", "NZXT", "Fractal Design"],
    "Monitors": ["Samsung", "LG", "ASUS", "Dell", "Acer"],
    "Peripherals": ["Logitech", "Razer", "SteelSeries", "Corsair"],
}
DEFAULT_BRANDS = ["HP", "Dell", "Lenovo", "ASUS", "Techno Zone", "Acer"]


@dataclass
class FilterOptions:
    category: Optional[str] = None
    brand: Optional[str] = None
    brands: list[str] = field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    sort_by: Optional[str] = None
    search_term: Optional[str] = None


def matches_query(product: dict, query: str) -> bool:
    """Case-insensitive substring match on name, description or category."""
    needle = (query or "").lower()
    return (
        needle in (product.get("name") or "").lower()
        or needle in (product.get("description") or "").lower()
        or needle in (product.get("category") or "").lower()
    )


def matches_category(category: str | None, value: str | None) -> bool:
    """Accept the category name in any case or its slug ("power-supplies")."""
    name = (category or "").strip()
    wanted = (value or "").strip()
    if not name or not wanted:
        return False
    return name.lower() == wanted.lower() or slugify(name) == wanted.lower()


def has_discount(product: dict) -> bool:
    return bool(product.get("discount")) and product["discount"] > 0


def discounted(products: Iterable[dict]) -> list[dict]:
    """Products on discount, biggest discount first (stable for ties)."""
    deals = [p for p in products if has_discount(p)]
    deals.sort(key=lambda p: p.get("discount") or 0, reverse=True)
    return deals


def similar(products: Sequence[dict], product_id: int, limit: int = SIMILAR_DEFAULT_LIMIT) -> list[dict]:
    target = next((p for p in products if p["id"] == product_id), None)
    if target is None or limit <= 0:
        return []
    same = [p for p in products if p["id"] != product_id and p["category"] == target["category"]]
    return same[:limit]


def distinct_categories(products: Iterable[dict]) -> list[str]:
    seen: dict[str, None] = {}
    for product in products:
        seen.setdefault(product["category"], None)
    return list(seen)


def filter_products(products: Iterable[dict], options: FilterOptions) -> list[dict]:
    filtered = list(products)

    if options.category:
        filtered = [p for p in filtered if matches_category(p["category"], options.category)]

    if options.brands:
        wanted = set(options.brands)
        filtered = [p for p in filtered if p.get("brand") in wanted]
    elif options.brand:
        brand = options.brand.lower()
        filtered = [p for p in filtered if (p.get("brand") or "").lower() == brand]

    if options.min_price is not None:
        filtered = [p for p in filtered if p["price"] >= options.min_price]
    if options.max_price is not None:
        filtered = [p for p in filtered if p["price"] <= options.max_price]

    if options.search_term:
        filtered = [p for p in filtered if matches_query(p, options.search_term)]

    return sort_products(filtered, options.sort_by or SORT_FEATURED)


def sort_products(products: list[dict], sort_by: str) -> list[dict]:
    if sort_by == SORT_PRICE_LOW:
        return sorted(products, key=lambda p: p["price"])
    if sort_by == SORT_PRICE_HIGH:
        return sorted(products, key=lambda p: p["price"], reverse=True)
    if sort_by == SORT_RATING:
        return sorted(products, key=lambda p: p.get("rating") or 0, reverse=True)
    if sort_by == SORT_DEALS:
        return discounted(products)
    # featured (and anything unknown): featured first, original order otherwise
    return sorted(products, key=lambda p: 0 if p.get("featured") else 1)


def price_bounds(products: Iterable[dict]) -> tuple[float, float]:
    prices = [p["price"] for p in products]
    if not prices:
        return 0.0, 0.0
    return min(prices), max(prices)


def default_brand_for_category(category: str | None, rng: random.Random | None = None) -> str:
    choices = BRANDS_BY_CATEGORY.get(category or "", DEFAULT_BRANDS)
    return (rng or random).choice(choices)
