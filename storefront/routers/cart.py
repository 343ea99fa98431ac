from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storefront.routers.deps import get_currency, get_shopper
from storefront.services.cart_service import MAX_LINE_QUANTITY, CartError, CartService
from storefront.services.catalog_service import ProductNotFoundError
from storefront.services.session_service import Shopper

router = APIRouter(prefix="/api/cart", tags=["cart"])
cart_service = CartService()


class CartItemIn(BaseModel):
    productId: int
    quantity: int = Field(1, ge=1, le=MAX_LINE_QUANTITY)


class QuantityIn(BaseModel):
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ProductNotFoundError):
        return HTTPException(404, str(exc))
    return HTTPException(getattr(exc, "status_code", 400), str(exc))


@router.get("")
def view_cart(shopper: Shopper = Depends(get_shopper), currency: str = Depends(get_currency)):
    return cart_service.view(shopper, currency)


@router.post("/items", status_code=201)
def add_item(
    payload: CartItemIn,
    shopper: Shopper = Depends(get_shopper),
    currency: str = Depends(get_currency),
):
    try:
        result = cart_service.add(shopper, payload.productId, payload.quantity, currency=currency)
    except (CartError, ProductNotFoundError) as exc:
        raise _http_error(exc) from exc
    return {"cart": result.cart, "message": result.message}


@router.patch("/items/{product_id}")
def update_item(
    product_id: int,
    payload: QuantityIn,
    shopper: Shopper = Depends(get_shopper),
    currency: str = Depends(get_currency),
):
    try:
        result = cart_service.update_quantity(shopper, product_id, payload.quantity, currency=currency)
    except CartError as exc:
        raise _http_error(exc) from exc
    return {"cart": result.cart, "message": result.message}


@router.delete("/items/{product_id}")
def remove_item(product_id: int, shopper: Shopper = Depends(get_shopper), currency: str = Depends(get_currency)):
    try:
        result = cart_service.remove(shopper, product_id, currency=currency)
    except CartError as exc:
        raise _http_error(exc) from exc
    return {"cart": result.cart, "message": result.message}


@router.delete("")
def clear_cart(shopper: Shopper = Depends(get_shopper), currency: str = Depends(get_currency)):
    result = cart_service.clear(shopper, currency=currency)
    return {"cart": result.cart, "message": result.message}
