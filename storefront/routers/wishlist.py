from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from storefront.routers.deps import get_shopper
from storefront.services.catalog_service import ProductNotFoundError
from storefront.services.session_service import Shopper
from storefront.services.wishlist_service import WishlistItemNotFoundError, WishlistService

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])
wishlist_service = WishlistService()


class WishlistItemIn(BaseModel):
    productId: int


@router.get("")
def view_wishlist(shopper: Shopper = Depends(get_shopper)):
    return wishlist_service.view(shopper)


@router.post("/items", status_code=201)
def add_item(payload: WishlistItemIn, response: Response, shopper: Shopper = Depends(get_shopper)):
    try:
        result = wishlist_service.add(shopper, payload.productId)
    except ProductNotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc
    if not result.added:
        response.status_code = 200
    return {"wishlist": result.wishlist, "message": result.message}


@router.get("/items/{product_id}")
def contains_item(product_id: int, shopper: Shopper = Depends(get_shopper)):
    return {"productId": product_id, "inWishlist": wishlist_service.contains(shopper, product_id)}


@router.delete("/items/{product_id}")
def remove_item(product_id: int, shopper: Shopper = Depends(get_shopper)):
    try:
        result = wishlist_service.remove(shopper, product_id)
    except WishlistItemNotFoundError as exc:
        raise HTTPException(404, str(exc)) from exc
    return {"wishlist": result.wishlist, "message": result.message}


@router.delete("")
def clear_wishlist(shopper: Shopper = Depends(get_shopper)):
    result = wishlist_service.clear(shopper)
    return {"wishlist": result.wishlist, "message": result.message}
