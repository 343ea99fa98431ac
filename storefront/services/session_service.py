"""Session helpers (issue tokens, cookies, validation) and shopper identity."""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, Response

from storefront.core.config import get_settings
from storefront.db.models import User
from storefront.repositories.sql_repository import SQLRepository

SESSION_COOKIE_NAME = "session"
CART_COOKIE_NAME = "cart_session"

_repo = SQLRepository()


@dataclass(frozen=True)
class Shopper:
    """Who owns a cart/wishlist: a signed-in user or an anonymous cart session."""

    user_id: Optional[int] = None
    session_id: Optional[str] = None

    @property
    def owner_key(self) -> str:
        if self.user_id is not None:
            return f"user:{self.user_id}"
        return f"session:{self.session_id}"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_session(user_id: int) -> str:
    """Create a new session token and persist it in the SQL store."""
    settings = get_settings()
    ttl = max(60, settings.session_ttl_seconds)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
    return _repo.create_user_session(user_id, expires_at)


def user_for_token(token: str | None) -> Optional[User]:
    if not token:
        return None
    entity = _repo.get_user_session(token)
    if not entity:
        return None
    if entity.expires_at and _as_utc(entity.expires_at) < datetime.now(timezone.utc):
        _repo.delete_user_session(token)
        return None
    return _repo.get_user(entity.user_id)


def current_user(request: Request) -> Optional[User]:
    """Return the user behind the session cookie, if any."""
    return user_for_token(request.cookies.get(SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    secure_cookie = settings.app_env == "prod"
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=secure_cookie,
        samesite="strict",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def delete_session(token: str) -> None:
    """Remove a session token from the store."""
    if not token:
        return
    _repo.delete_user_session(token)


def ensure_cart_session(request: Request, response: Response) -> str:
    """Reuse the anonymous cart cookie or issue a fresh one."""
    token = request.cookies.get(CART_COOKIE_NAME)
    if token and len(token) >= 16:
        return token
    token = secrets.token_urlsafe(24)
    settings = get_settings()
    response.set_cookie(
        CART_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.app_env == "prod",
        samesite="lax",
        max_age=settings.cart_ttl_seconds,
        path="/",
    )
    return token


def resolve_shopper(request: Request, response: Response) -> Shopper:
    user = current_user(request)
    if user:
        return Shopper(user_id=user.id)
    return Shopper(session_id=ensure_cart_session(request, response))
