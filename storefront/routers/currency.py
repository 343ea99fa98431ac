from fastapi import APIRouter, Depends, Query

from storefront.routers.deps import get_currency
from storefront.services.currency_service import money, rates

router = APIRouter(prefix="/api/currencies", tags=["currency"])


@router.get("")
def list_currencies():
    return rates()


@router.get("/convert")
def convert(amount: float = Query(..., ge=0), currency: str = Depends(get_currency)):
    converted = money(amount, currency)
    return {"amountUsd": amount, "currency": currency, **converted}
