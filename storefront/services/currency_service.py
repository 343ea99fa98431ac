"""Price conversion for responses that accept a display currency."""
from __future__ import annotations

from storefront.core.config import get_settings
from storefront.core.utils import round_money
from storefront.domain import pricing


def money(amount_usd: float, currency: str) -> dict:
    settings = get_settings()
    converted = round_money(pricing.convert_price(amount_usd, currency, settings.egp_rate))
    return {"amount": converted, "formatted": pricing.format_price(converted, currency)}


def rates() -> list[dict]:
    settings = get_settings()
    return [
        {"code": pricing.BASE_CURRENCY, "symbol": "$", "rate": 1.0},
        {"code": pricing.CURRENCY_EGP, "symbol": "EGP", "rate": settings.egp_rate},
    ]
