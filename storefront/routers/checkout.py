from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storefront.routers.deps import get_currency, get_shopper
from storefront.services.checkout_service import CheckoutError, CheckoutService, ContactDetails, PaymentDetails
from storefront.services.session_service import Shopper

router = APIRouter(prefix="/api/checkout", tags=["checkout"])
checkout_service = CheckoutService()


class QuoteIn(BaseModel):
    shippingMethod: Optional[str] = None
    promoCode: Optional[str] = None


class OrderIn(BaseModel):
    email: str = Field(..., max_length=255)
    firstName: str = Field(..., max_length=100)
    lastName: str = Field(..., max_length=100)
    address: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zipCode: str = Field(..., max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=40)
    cardName: str = Field(..., max_length=100)
    cardNumber: str = Field(..., max_length=30)
    expiryDate: str = Field(..., max_length=7)
    cvv: str = Field(..., max_length=4)
    shippingMethod: Optional[str] = None
    promoCode: Optional[str] = None
    specialInstructions: Optional[str] = Field(None, max_length=1000)


def _http_error(exc: CheckoutError) -> HTTPException:
    return HTTPException(exc.status_code, exc.message)


@router.get("/shipping-methods")
def shipping_methods():
    return checkout_service.shipping_methods()


@router.post("/quote")
def quote(payload: QuoteIn, shopper: Shopper = Depends(get_shopper), currency: str = Depends(get_currency)):
    try:
        result = checkout_service.quote(shopper, payload.shippingMethod, payload.promoCode)
    except CheckoutError as exc:
        raise _http_error(exc) from exc
    return result.as_dict(currency)


@router.post("/orders", status_code=201)
def place_order(
    payload: OrderIn,
    shopper: Shopper = Depends(get_shopper),
    currency: str = Depends(get_currency),
):
    contact = ContactDetails(
        email=payload.email,
        first_name=payload.firstName,
        last_name=payload.lastName,
        address=payload.address,
        city=payload.city,
        state=payload.state,
        zip_code=payload.zipCode,
        country=payload.country,
        phone=payload.phone,
    )
    payment = PaymentDetails(
        card_name=payload.cardName,
        card_number=payload.cardNumber,
        expiry_date=payload.expiryDate,
        cvv=payload.cvv,
    )
    try:
        return checkout_service.place_order(
            shopper,
            contact,
            payment,
            shipping_method=payload.shippingMethod,
            promo_code=payload.promoCode,
            special_instructions=payload.specialInstructions,
            currency=currency,
        )
    except CheckoutError as exc:
        raise _http_error(exc) from exc


@router.get("/orders")
def list_orders(shopper: Shopper = Depends(get_shopper), currency: str = Depends(get_currency)):
    return checkout_service.list_orders(shopper, currency)


@router.get("/orders/{number}")
def get_order(number: str, shopper: Shopper = Depends(get_shopper), currency: str = Depends(get_currency)):
    try:
        return checkout_service.get_order(shopper, number, currency)
    except CheckoutError as exc:
        raise _http_error(exc) from exc
