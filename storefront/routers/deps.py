"""Shared request dependencies (shopper identity, auth guards, currency)."""
from __future__ import annotations

from fastapi import HTTPException, Query, Request, Response

from storefront.db.models import User
from storefront.domain import accounts, pricing
from storefront.services.session_service import Shopper, current_user, resolve_shopper


def get_shopper(request: Request, response: Response) -> Shopper:
    return resolve_shopper(request, response)


def require_user(request: Request) -> User:
    user = current_user(request)
    if not user:
        raise HTTPException(401, "Authentication required")
    return user


def require_staff(request: Request) -> User:
    user = require_user(request)
    if not accounts.is_staff(user.role):
        raise HTTPException(403, "Staff access required")
    return user


def require_admin(request: Request) -> User:
    user = require_user(request)
    if user.role != accounts.ROLE_ADMIN:
        raise HTTPException(403, "Admin access required")
    return user


def get_currency(currency: str = Query(pricing.BASE_CURRENCY)) -> str:
    try:
        return pricing.normalize_currency(currency)
    except pricing.UnknownCurrencyError as exc:
        raise HTTPException(400, str(exc)) from exc


def parse_id(value: str, detail: str) -> int:
    """Path ids are integers; anything else cannot exist."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise HTTPException(404, detail) from None
