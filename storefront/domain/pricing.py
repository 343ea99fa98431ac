"""Money rules: currencies, shipping methods, tax, promo codes and card checks."""
from __future__ import annotations

import re
import secrets
import string
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from storefront.core.utils import round_money

BASE_CURRENCY = "USD"
CURRENCY_EGP = "EGP"
SUPPORTED_CURRENCIES = (BASE_CURRENCY, CURRENCY_EGP)


class UnknownCurrencyError(ValueError):
    pass


def normalize_currency(value: str | None) -> str:
    code = (value or BASE_CURRENCY).strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise UnknownCurrencyError(f"Unsupported currency: {value}")
    return code


def convert_price(amount_usd: float, currency: str, egp_rate: float) -> float:
    if currency == BASE_CURRENCY:
        return amount_usd
    return amount_usd * egp_rate


def format_price(amount: float, currency: str) -> str:
    if currency == BASE_CURRENCY:
        return f"${amount:.2f}"
    return f"{amount:.2f} {currency}"


@dataclass(frozen=True)
class ShippingMethod:
    code: str
    label: str
    eta: str
    cost: float


SHIPPING_METHODS = {
    "standard": ShippingMethod("standard", "Standard Shipping", "5-7 business days", 0.0),
    "express": ShippingMethod("express", "Express Shipping", "2-3 business days", 12.99),
    "overnight": ShippingMethod("overnight", "Overnight Shipping", "Next business day", 24.99),
}
DEFAULT_SHIPPING_METHOD = "standard"


def compute_tax(taxable: float, rate: float) -> float:
    return round_money(max(0.0, taxable) * rate)


# -------------------------- promo codes --------------------------
PROMO_PREFIX = "MEDTECH"
PROMO_ALPHABET = string.ascii_uppercase + string.digits
PROMO_RANDOM_LENGTH = 6
PROMO_PERCENTAGE = "percentage"
PROMO_FIXED = "fixed"
PROMO_TYPES = (PROMO_PERCENTAGE, PROMO_FIXED)

PROMO_ACTIVE = "active"
PROMO_EXPIRED = "expired"
PROMO_USED = "used"


def generate_promo_code() -> str:
    suffix = "".join(secrets.choice(PROMO_ALPHABET) for _ in range(PROMO_RANDOM_LENGTH))
    return PROMO_PREFIX + suffix


def normalize_promo_code(value: str | None) -> str:
    return (value or "").strip().upper()


def promo_status(valid_until: Optional[datetime], usage_count: int, usage_limit: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if valid_until is not None:
        expires = valid_until if valid_until.tzinfo else valid_until.replace(tzinfo=timezone.utc)
        if expires < now:
            return PROMO_EXPIRED
    if usage_limit > 0 and usage_count >= usage_limit:
        return PROMO_USED
    return PROMO_ACTIVE


def promo_discount(lines: Iterable[tuple[int, float]], kind: str, value: float, product_ids: Iterable[int] = ()) -> float:
    """Discount for (product_id, line_total) pairs.

    Only lines whose product is listed are eligible when product_ids is not
    empty. Fixed discounts never exceed the eligible subtotal.
    """
    allowed = set(product_ids or ())
    eligible = sum(total for pid, total in lines if not allowed or pid in allowed)
    if eligible <= 0 or value <= 0:
        return 0.0
    if kind == PROMO_PERCENTAGE:
        return round_money(eligible * min(value, 100.0) / 100.0)
    return round_money(min(value, eligible))


# -------------------------- payment checks --------------------------
_CARD_PATTERN = re.compile(r"[0-9]{12,19}")
_CVV_PATTERN = re.compile(r"[0-9]{3,4}")
_EXPIRY_PATTERN = re.compile(r"(0[1-9]|1[0-2])/([0-9]{2})")


def digits_only(value: str | None) -> str:
    return re.sub(r"[\s-]", "", value or "")


def luhn_valid(number: str) -> bool:
    digits = digits_only(number)
    if not _CARD_PATTERN.fullmatch(digits):
        return False
    total = 0
    for idx, char in enumerate(reversed(digits)):
        n = int(char)
        if idx % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def expiry_valid(value: str | None, today: Optional[date] = None) -> bool:
    """MM/YY, valid through the last day of that month."""
    match = _EXPIRY_PATTERN.fullmatch((value or "").strip())
    if not match:
        return False
    month, year = int(match.group(1)), 2000 + int(match.group(2))
    today = today or date.today()
    return (year, month) >= (today.year, today.month)


def cvv_valid(value: str | None) -> bool:
    return bool(_CVV_PATTERN.fullmatch((value or "").strip()))
