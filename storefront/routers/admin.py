"""Staff-only catalog maintenance, promo codes, the order log and user management."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storefront.db.models import User
from storefront.domain import accounts, pricing
from storefront.routers.deps import get_currency, parse_id, require_admin, require_staff
from storefront.services.auth_service import (
    AccountExistsError,
    AuthService,
    RegistrationError,
    UserNotFoundError,
    user_to_dict,
)
from storefront.services.catalog_service import CatalogService, ProductNotFoundError
from storefront.services.checkout_service import CheckoutService
from storefront.services.promo_service import PromoError, PromoService

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_staff)])
catalog = CatalogService()
promos = PromoService()
checkout = CheckoutService()
auth = AuthService()


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    fullDescription: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=64)
    brand: Optional[str] = Field(None, max_length=64)
    price: float = Field(..., ge=0)
    originalPrice: Optional[float] = Field(None, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    image: str = Field(..., min_length=1)
    additionalImages: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    badge: Optional[str] = Field(None, max_length=64)
    sku: str = Field(..., min_length=1, max_length=64)
    warranty: Optional[str] = Field(None, max_length=64)
    inStock: bool = True
    featured: bool = False
    new: bool = False
    discount: Optional[int] = Field(None, ge=0, le=100)


class PromoIn(BaseModel):
    discount: float = Field(..., gt=0)
    type: str = pricing.PROMO_PERCENTAGE
    validUntil: Optional[datetime] = None
    usageLimit: int = Field(100, ge=0)
    productIds: list[int] = Field(default_factory=list)
    code: Optional[str] = Field(None, max_length=32)


class UserIn(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)
    role: str = accounts.ROLE_CUSTOMER


class RoleIn(BaseModel):
    role: str = Field(..., min_length=1, max_length=32)


@router.post("/products", status_code=201)
def create_product(payload: ProductIn):
    return catalog.create_product(payload.model_dump())


@router.put("/products/{product_id}")
def update_product(product_id: str, payload: ProductIn):
    pid = parse_id(product_id, "Product not found")
    try:
        return catalog.update_product(pid, payload.model_dump())
    except ProductNotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc


@router.delete("/products/{product_id}")
def delete_product(product_id: str):
    pid = parse_id(product_id, "Product not found")
    try:
        catalog.delete_product(pid)
    except ProductNotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc
    return {"ok": True}


@router.post("/products/reset")
def reset_products():
    return {"products": catalog.reset_catalog()}


@router.get("/promos")
def list_promos():
    return promos.list()


@router.post("/promos", status_code=201)
def create_promo(payload: PromoIn):
    try:
        return promos.create(
            discount=payload.discount,
            kind=payload.type,
            valid_until=payload.validUntil,
            usage_limit=payload.usageLimit,
            product_ids=payload.productIds,
            code=payload.code,
        )
    except PromoError as exc:
        raise HTTPException(exc.status_code, exc.message) from exc


@router.delete("/promos/{code}")
def delete_promo(code: str):
    try:
        promos.delete(code)
    except PromoError as exc:
        raise HTTPException(exc.status_code, exc.message) from exc
    return {"ok": True}


@router.get("/orders")
def list_orders(currency: str = Depends(get_currency)):
    return checkout.list_all_orders(currency)


@router.get("/users")
def list_users(_: User = Depends(require_admin)):
    return [user_to_dict(u) for u in auth.list_users()]


@router.post("/users", status_code=201)
def add_user(payload: UserIn, _: User = Depends(require_admin)):
    try:
        user = auth.add_user(payload.username, payload.password, payload.role)
    except AccountExistsError as exc:
        raise HTTPException(409, str(exc)) from exc
    except RegistrationError as exc:
        raise HTTPException(400, exc.message) from exc
    return user_to_dict(user)


@router.patch("/users/{user_id}")
def change_role(user_id: str, payload: RoleIn, actor: User = Depends(require_admin)):
    uid = parse_id(user_id, "User not found")
    try:
        user = auth.change_role(actor, uid, payload.role)
    except RegistrationError as exc:
        raise HTTPException(400, exc.message) from exc
    except UserNotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc
    return user_to_dict(user)


@router.delete("/users/{user_id}")
def remove_user(user_id: str, actor: User = Depends(require_admin)):
    uid = parse_id(user_id, "User not found")
    try:
        auth.remove_user(actor, uid)
    except RegistrationError as exc:
        raise HTTPException(400, exc.message) from exc
    except UserNotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc
    return {"ok": True}
