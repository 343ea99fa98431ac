from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, Field

from storefront.core.rate_limiter import rate_limit_ip
from storefront.services.contact_service import ContactError, ContactService

router = APIRouter(prefix="/api", tags=["engagement"])
contact_service = ContactService()


class NewsletterIn(BaseModel):
    email: str = Field(..., max_length=255)


class ContactIn(BaseModel):
    name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    subject: str = Field(..., max_length=200)
    message: str


@router.post("/newsletter", status_code=201)
def subscribe(payload: NewsletterIn, request: Request, response: Response):
    rate_limit_ip(request, "newsletter", limit=5, window_seconds=60)
    try:
        created = contact_service.subscribe(payload.email)
    except ContactError as exc:
        raise HTTPException(400, exc.message) from exc
    if not created:
        response.status_code = 200
        return {"subscribed": True, "message": "You are already subscribed"}
    return {"subscribed": True, "message": "Thank you for subscribing!"}


@router.post("/contact", status_code=201)
def send_message(payload: ContactIn, request: Request):
    rate_limit_ip(request, "contact", limit=3, window_seconds=60)
    try:
        result = contact_service.send_message(payload.name, payload.email, payload.subject, payload.message)
    except ContactError as exc:
        raise HTTPException(400, exc.message) from exc
    return {**result, "message": "Your message has been sent"}
