from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field

from storefront.core.rate_limiter import rate_limit_ip
from storefront.db.models import User
from storefront.routers.deps import require_user
from storefront.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    LoginSuccess,
    RegistrationError,
    user_to_dict,
)
from storefront.services.cart_service import CartService
from storefront.services.session_service import (
    CART_COOKIE_NAME,
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    set_session_cookie,
)
from storefront.services.wishlist_service import WishlistService

router = APIRouter(prefix="/api/auth", tags=["auth"])
auth_service = AuthService()
cart_service = CartService()
wishlist_service = WishlistService()


class CredentialsIn(BaseModel):
    username: str = Field(..., max_length=64)
    password: str = Field(..., max_length=256)


def _start_session(request: Request, response: Response, result: LoginSuccess) -> dict:
    """Attach the session cookie and fold the anonymous cart/wishlist into the account."""
    anonymous = request.cookies.get(CART_COOKIE_NAME)
    cart_service.merge_on_login(anonymous, result.user.id)
    wishlist_service.merge_on_login(anonymous, result.user.id)
    set_session_cookie(response, result.session_token)
    return {"user": user_to_dict(result.user)}


@router.post("/register", status_code=201)
def register(payload: CredentialsIn, request: Request, response: Response):
    rate_limit_ip(request, "auth:register", limit=5, window_seconds=60)
    try:
        result = auth_service.register(payload.username, payload.password)
    except AccountExistsError as exc:
        raise HTTPException(409, str(exc)) from exc
    except RegistrationError as exc:
        raise HTTPException(400, exc.message) from exc
    return _start_session(request, response, result)


@router.post("/login")
def login(payload: CredentialsIn, request: Request, response: Response):
    rate_limit_ip(request, "auth:login", limit=10, window_seconds=60)
    try:
        result = auth_service.login(payload.username, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, str(exc)) from exc
    return _start_session(request, response, result)


@router.post("/logout")
def logout(request: Request, response: Response):
    auth_service.logout(request.cookies.get(SESSION_COOKIE_NAME))
    clear_session_cookie(response)
    return {"ok": True}


@router.get("/me")
def me(user: User = Depends(require_user)):
    return {"user": user_to_dict(user)}
