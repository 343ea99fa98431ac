"""Promo code administration and redemption checks."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from storefront.db.models import PromoCode
from storefront.domain import pricing
from storefront.repositories.sql_repository import SQLRepository

_MAX_GENERATION_ATTEMPTS = 10


class PromoError(Exception):
    def __init__(self, message: str, code: str = "invalid_promo", status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


def promo_to_dict(entity: PromoCode, now: Optional[datetime] = None) -> dict:
    return {
        "code": entity.code,
        "discount": float(entity.discount),
        "type": entity.type,
        "validUntil": entity.valid_until.isoformat() if entity.valid_until else None,
        "usageLimit": int(entity.usage_limit),
        "usageCount": int(entity.usage_count),
        "products": list(entity.product_ids or []),
        "status": pricing.promo_status(entity.valid_until, int(entity.usage_count), int(entity.usage_limit), now),
        "createdAt": entity.created_at.isoformat() if entity.created_at else None,
    }


class PromoService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def _unique_code(self) -> str:
        for _ in range(_MAX_GENERATION_ATTEMPTS):
            candidate = pricing.generate_promo_code()
            if not self.repository.get_promo(candidate):
                return candidate
        raise PromoError("Could not generate a unique promo code", "generation_failed", 500)

    def create(
        self,
        *,
        discount: float,
        kind: str = pricing.PROMO_PERCENTAGE,
        valid_until: Optional[datetime] = None,
        usage_limit: int = 100,
        product_ids: Iterable[int] = (),
        code: Optional[str] = None,
    ) -> dict:
        if kind not in pricing.PROMO_TYPES:
            raise PromoError("Discount type must be percentage or fixed", "invalid_type")
        if discount <= 0 or (kind == pricing.PROMO_PERCENTAGE and discount > 100):
            raise PromoError("Discount value is out of range", "invalid_discount")
        ids = sorted({int(pid) for pid in product_ids})
        missing = [pid for pid in ids if not self.repository.get_product(pid)]
        if missing:
            raise PromoError(f"Unknown product ids: {missing}", "unknown_products")
        normalized = pricing.normalize_promo_code(code)
        if normalized:
            if self.repository.get_promo(normalized):
                raise PromoError("Promo code already exists", "in_use", 409)
        else:
            normalized = self._unique_code()
        if valid_until is not None and valid_until.tzinfo is None:
            valid_until = valid_until.replace(tzinfo=timezone.utc)
        entity = self.repository.create_promo(
            {
                "code": normalized,
                "discount": float(discount),
                "type": kind,
                "valid_until": valid_until,
                "usage_limit": int(usage_limit),
                "usage_count": 0,
                "product_ids": ids,
                "created_at": datetime.now(timezone.utc),
            }
        )
        return promo_to_dict(entity)

    def list(self) -> list[dict]:
        return [promo_to_dict(p) for p in self.repository.list_promos()]

    def delete(self, code: str) -> None:
        if not self.repository.delete_promo(pricing.normalize_promo_code(code)):
            raise PromoError("Promo code not found", "not_found", 404)

    def resolve(self, code: str | None) -> PromoCode:
        """Return a redeemable promo or raise PromoError explaining why not."""
        normalized = pricing.normalize_promo_code(code)
        entity = self.repository.get_promo(normalized) if normalized else None
        if not entity:
            raise PromoError("Invalid promo code", "invalid_promo")
        status = pricing.promo_status(entity.valid_until, int(entity.usage_count), int(entity.usage_limit))
        if status == pricing.PROMO_EXPIRED:
            raise PromoError("This promo code has expired", "expired")
        if status == pricing.PROMO_USED:
            raise PromoError("This promo code has reached its usage limit", "used_up")
        return entity

    def discount_for(self, entity: PromoCode, lines: Iterable[tuple[int, float]]) -> float:
        return pricing.promo_discount(lines, entity.type, float(entity.discount), entity.product_ids or ())
