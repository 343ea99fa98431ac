"""
Checkout use cases: shipping options, order quotes and order placement.
"""

from __future__ import annotations

import html
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from storefront.core.config import get_settings
from storefront.core.mailer import send_email
from storefront.core.utils import absolute_url, is_valid_email, round_money
from storefront.db.models import Order
from storefront.domain import pricing
from storefront.repositories.sql_repository import SQLRepository
from storefront.services.cart_service import CartLine, CartService
from storefront.services.currency_service import money
from storefront.services.promo_service import PromoError, PromoService
from storefront.services.session_service import Shopper

logger = logging.getLogger(__name__)

REQUIRED_CONTACT_FIELDS = ("email", "first_name", "last_name", "address", "city", "state", "zip_code")


class CheckoutError(Exception):
    def __init__(self, message: str, code: str = "invalid", status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


@dataclass
class ContactDetails:
    email: str
    first_name: str
    last_name: str
    address: str
    city: str
    state: str
    zip_code: str
    country: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class PaymentDetails:
    card_name: str
    card_number: str
    expiry_date: str
    cvv: str


@dataclass
class Quote:
    subtotal: float
    discount: float
    tax: float
    shipping: float
    total: float
    shipping_method: str
    promo_code: Optional[str] = None
    lines: list[CartLine] = field(default_factory=list)

    def as_dict(self, currency: str = pricing.BASE_CURRENCY) -> dict:
        return {
            "currency": currency,
            "shippingMethod": self.shipping_method,
            "promoCode": self.promo_code,
            "subtotal": money(self.subtotal, currency)["amount"],
            "discount": money(self.discount, currency)["amount"],
            "tax": money(self.tax, currency)["amount"],
            "shipping": money(self.shipping, currency)["amount"],
            "total": money(self.total, currency)["amount"],
            "formattedTotal": money(self.total, currency)["formatted"],
            "itemCount": sum(line.quantity for line in self.lines),
        }


def order_to_dict(entity: Order, currency: str = pricing.BASE_CURRENCY) -> dict:
    return {
        "number": entity.number,
        "email": entity.email,
        "firstName": entity.first_name,
        "lastName": entity.last_name,
        "address": entity.address,
        "city": entity.city,
        "state": entity.state,
        "zipCode": entity.zip_code,
        "country": entity.country,
        "shippingMethod": entity.shipping_method,
        "promoCode": entity.promo_code,
        "cardLast4": entity.card_last4,
        "items": list(entity.items or []),
        "currency": currency,
        "subtotal": money(float(entity.subtotal), currency)["amount"],
        "discount": money(float(entity.discount or 0), currency)["amount"],
        "tax": money(float(entity.tax), currency)["amount"],
        "shipping": money(float(entity.shipping), currency)["amount"],
        "total": money(float(entity.total), currency)["amount"],
        "createdAt": entity.created_at.isoformat() if entity.created_at else None,
    }


def shipping_method_to_dict(method: pricing.ShippingMethod) -> dict:
    return {"code": method.code, "label": method.label, "eta": method.eta, "cost": method.cost}


class CheckoutService:
    def __init__(
        self,
        repository: SQLRepository | None = None,
        carts: CartService | None = None,
        promos: PromoService | None = None,
    ) -> None:
        self.repository = repository or SQLRepository()
        self.carts = carts or CartService(self.repository)
        self.promos = promos or PromoService(self.repository)

    def shipping_methods(self) -> list[dict]:
        return [shipping_method_to_dict(m) for m in pricing.SHIPPING_METHODS.values()]

    def quote(self, shopper: Shopper, shipping_method: str | None = None, promo_code: str | None = None) -> Quote:
        method_code = (shipping_method or pricing.DEFAULT_SHIPPING_METHOD).strip().lower()
        method = pricing.SHIPPING_METHODS.get(method_code)
        if not method:
            raise CheckoutError("Unknown shipping method", "invalid_shipping")
        lines = self.carts.lines(shopper)
        subtotal = round_money(sum(line.line_total for line in lines))
        discount = 0.0
        applied = None
        if (promo_code or "").strip():
            try:
                promo = self.promos.resolve(promo_code)
            except PromoError as exc:
                raise CheckoutError(exc.message, exc.code, exc.status_code) from exc
            discount = self.promos.discount_for(promo, [(line.product["id"], line.line_total) for line in lines])
            applied = promo.code
        tax = pricing.compute_tax(subtotal - discount, get_settings().tax_rate)
        shipping = method.cost if lines else 0.0
        total = round_money(subtotal - discount + tax + shipping)
        return Quote(subtotal, discount, tax, shipping, total, method.code, applied, lines)

    def _validate(self, contact: ContactDetails, payment: PaymentDetails) -> None:
        missing = [name for name in REQUIRED_CONTACT_FIELDS if not (getattr(contact, name) or "").strip()]
        if missing:
            raise CheckoutError("Please fill in all required fields", "missing_fields")
        if not is_valid_email(contact.email):
            raise CheckoutError("Invalid e-mail address", "invalid_email")
        payment_fields = (payment.card_name, payment.card_number, payment.expiry_date, payment.cvv)
        if not all((value or "").strip() for value in payment_fields):
            raise CheckoutError("Please fill in all payment information", "missing_payment")
        if not pricing.luhn_valid(payment.card_number):
            raise CheckoutError("Invalid card number", "invalid_card")
        if not pricing.expiry_valid(payment.expiry_date):
            raise CheckoutError("Card is expired or expiry date is invalid", "invalid_expiry")
        if not pricing.cvv_valid(payment.cvv):
            raise CheckoutError("Invalid security code", "invalid_cvv")

    def _order_number(self) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
        return f"ORD-{stamp}-{secrets.token_hex(4).upper()}"

    def place_order(
        self,
        shopper: Shopper,
        contact: ContactDetails,
        payment: PaymentDetails,
        *,
        shipping_method: str | None = None,
        promo_code: str | None = None,
        special_instructions: str | None = None,
        currency: str = pricing.BASE_CURRENCY,
    ) -> dict:
        self._validate(contact, payment)
        quote = self.quote(shopper, shipping_method, promo_code)
        if not quote.lines:
            raise CheckoutError("Your cart is empty", "empty_cart")
        unavailable = [line.product["name"] for line in quote.lines if not line.product["inStock"]]
        if unavailable:
            raise CheckoutError(f"Out of stock: {', '.join(unavailable)}", "out_of_stock", 409)
        items = [
            {
                "productId": line.product["id"],
                "name": line.product["name"],
                "sku": line.product["sku"],
                "price": line.product["price"],
                "quantity": line.quantity,
                "lineTotal": line.line_total,
            }
            for line in quote.lines
        ]
        entity = self.repository.create_order(
            {
                "number": self._order_number(),
                "owner_key": shopper.owner_key,
                "email": contact.email.strip(),
                "first_name": contact.first_name.strip(),
                "last_name": contact.last_name.strip(),
                "address": contact.address.strip(),
                "city": contact.city.strip(),
                "state": contact.state.strip(),
                "zip_code": contact.zip_code.strip(),
                "country": (contact.country or "").strip() or None,
                "phone": (contact.phone or "").strip() or None,
                "special_instructions": (special_instructions or "").strip() or None,
                "shipping_method": quote.shipping_method,
                "promo_code": quote.promo_code,
                "card_last4": pricing.digits_only(payment.card_number)[-4:],
                "subtotal": quote.subtotal,
                "discount": quote.discount,
                "tax": quote.tax,
                "shipping": quote.shipping,
                "total": quote.total,
                "items": items,
                "created_at": datetime.now(timezone.utc),
            },
            promo_code=quote.promo_code,
        )
        if entity is None:
            raise CheckoutError("This promo code has reached its usage limit", "used_up")
        self.carts.clear(shopper)
        logger.info("Order %s placed (%s item(s), total %.2f)", entity.number, len(items), quote.total)
        self._send_confirmation(entity)
        return order_to_dict(entity, currency)

    def get_order(self, shopper: Shopper, number: str, currency: str = pricing.BASE_CURRENCY) -> dict:
        entity = self.repository.get_order((number or "").strip())
        if not entity or entity.owner_key != shopper.owner_key:
            raise CheckoutError("Order not found", "not_found", 404)
        return order_to_dict(entity, currency)

    def list_orders(self, shopper: Shopper, currency: str = pricing.BASE_CURRENCY) -> list[dict]:
        return [order_to_dict(o, currency) for o in self.repository.list_orders(shopper.owner_key)]

    def list_all_orders(self, currency: str = pricing.BASE_CURRENCY) -> list[dict]:
        """Every order in the store, newest first, for the staff dashboard."""
        return [order_to_dict(o, currency) for o in self.repository.list_all_orders()]

    def _send_confirmation(self, order: Order) -> bool:
        rows = "".join(
            f"<li>{html.escape(item['name'])} &times; {item['quantity']}: ${item['lineTotal']:.2f}</li>"
            for item in order.items
        )
        body = (
            f"<p>Hi {html.escape(order.first_name)},</p>"
            f"<p>Thank you for your purchase. Your order <strong>{order.number}</strong> is confirmed.</p>"
            f"<ul>{rows}</ul>"
            f"<p>Total: ${float(order.total):.2f}</p>"
            f"<p><a href=\"{absolute_url('/')}\">Continue shopping</a></p>"
        )
        text = f"Order {order.number} confirmed. Total: ${float(order.total):.2f}"
        return send_email(f"Order {order.number} confirmed", order.email, body, text)
