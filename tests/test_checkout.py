from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from storefront.repositories.sql_repository import SQLRepository
from storefront.services.checkout_service import CheckoutService, ContactDetails, PaymentDetails
from storefront.services.promo_service import PromoService
from storefront.services.session_service import Shopper

VALID_CARD = {
    "cardName": "Ada Lovelace",
    "cardNumber": "4242 4242 4242 4242",
    "expiryDate": "12/99",
    "cvv": "123",
}

CONTACT = {
    "email": "ada@example.com",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "address": "12 Analytical St",
    "city": "London",
    "state": "LDN",
    "zipCode": "12345",
    "country": "UK",
}


def _order(**overrides):
    payload = {**CONTACT, **VALID_CARD}
    payload.update(overrides)
    return payload


def test_shipping_methods(client):
    methods = {m["code"]: m["cost"] for m in client.get("/api/checkout/shipping-methods").json()}
    assert methods == {"standard": 0.0, "express": 12.99, "overnight": 24.99}


def test_quote_includes_tax_and_shipping(client):
    client.post("/api/cart/items", json={"productId": 4, "quantity": 2})
    quote = client.post("/api/checkout/quote", json={}).json()
    assert quote["subtotal"] == 259.98
    assert quote["tax"] == 26.0
    assert quote["shipping"] == 0.0
    assert quote["total"] == 285.98
    assert quote["itemCount"] == 2

    quote = client.post("/api/checkout/quote", json={"shippingMethod": "express"}).json()
    assert quote["total"] == 298.97

    resp = client.post("/api/checkout/quote", json={"shippingMethod": "teleport"})
    assert resp.status_code == 400


def test_quote_with_percentage_promo(client):
    PromoService().create(discount=10, kind="percentage", code="save10")
    client.post("/api/cart/items", json={"productId": 4, "quantity": 2})
    quote = client.post("/api/checkout/quote", json={"promoCode": "SAVE10"}).json()
    assert quote["promoCode"] == "SAVE10"
    assert quote["discount"] == 26.0
    assert quote["tax"] == 23.4
    assert quote["total"] == 257.38


def test_invalid_and_expired_promos(client):
    client.post("/api/cart/items", json={"productId": 1})
    resp = client.post("/api/checkout/quote", json={"promoCode": "NOPE"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid promo code"

    PromoService().create(
        discount=5, kind="fixed", code="OLD", valid_until=datetime.now(timezone.utc) - timedelta(days=1)
    )
    resp = client.post("/api/checkout/quote", json={"promoCode": "old"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "This promo code has expired"


def test_place_order_clears_cart_and_is_owner_only(client):
    client.post("/api/cart/items", json={"productId": 3})
    resp = client.post("/api/checkout/orders", json=_order(shippingMethod="overnight"))
    assert resp.status_code == 201
    order = resp.json()
    assert order["number"].startswith("ORD-")
    assert order["cardLast4"] == "4242"
    assert order["items"][0]["productId"] == 3
    assert order["shipping"] == 24.99
    assert order["total"] == 266.98

    assert client.get("/api/cart").json()["items"] == []
    assert [o["number"] for o in client.get("/api/checkout/orders").json()] == [order["number"]]
    fetched = client.get(f"/api/checkout/orders/{order['number']}", params={"currency": "EGP"}).json()
    assert fetched["currency"] == "EGP"

    from storefront.app import create_app

    with TestClient(create_app()) as stranger:
        assert stranger.get(f"/api/checkout/orders/{order['number']}").status_code == 404


def test_place_order_validation(client):
    resp = client.post("/api/checkout/orders", json=_order())
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Your cart is empty"

    client.post("/api/cart/items", json={"productId": 1})
    resp = client.post("/api/checkout/orders", json=_order(cardNumber="4242 4242 4242 4241"))
    assert resp.json()["detail"] == "Invalid card number"
    resp = client.post("/api/checkout/orders", json=_order(expiryDate="01/20"))
    assert resp.json()["detail"] == "Card is expired or expiry date is invalid"
    resp = client.post("/api/checkout/orders", json=_order(email="not-an-email"))
    assert resp.json()["detail"] == "Invalid e-mail address"
    resp = client.post("/api/checkout/orders", json=_order(city="  "))
    assert resp.json()["detail"] == "Please fill in all required fields"
    resp = client.post("/api/checkout/orders", json=_order(cardNumber="424242424242424²"))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid card number"
    resp = client.post("/api/checkout/orders", json=_order(cvv="²²²"))
    assert resp.json()["detail"] == "Invalid security code"
    assert client.post("/api/checkout/orders", json={"email": "x@y.z"}).status_code == 422


def test_promo_usage_is_consumed(client):
    PromoService().create(discount=20, kind="fixed", code="ONCE", usage_limit=1)
    client.post("/api/cart/items", json={"productId": 1})
    assert client.post("/api/checkout/orders", json=_order(promoCode="ONCE")).status_code == 201

    client.post("/api/cart/items", json={"productId": 1})
    resp = client.post("/api/checkout/orders", json=_order(promoCode="ONCE"))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "This promo code has reached its usage limit"


def test_order_responses_follow_requested_currency(client):
    client.post("/api/cart/items", json={"productId": 4})
    resp = client.post("/api/checkout/orders", params={"currency": "EGP"}, json=_order())
    assert resp.status_code == 201
    placed = resp.json()
    assert placed["currency"] == "EGP"

    usd = client.get(f"/api/checkout/orders/{placed['number']}").json()
    assert usd["currency"] == "USD"
    assert placed["total"] == round(usd["total"] * 31, 2)

    listed = client.get("/api/checkout/orders", params={"currency": "EGP"}).json()
    assert [o["currency"] for o in listed] == ["EGP"]
    assert listed[0]["total"] == placed["total"]
    assert client.get("/api/checkout/orders", params={"currency": "JPY"}).status_code == 400


def test_failed_order_insert_leaves_promo_unused(seeded_db, monkeypatch):
    contact = ContactDetails(
        email="ada@example.com",
        first_name="Ada",
        last_name="Lovelace",
        address="12 Analytical St",
        city="London",
        state="LDN",
        zip_code="12345",
    )
    payment = PaymentDetails("Ada Lovelace", "4242424242424242", "12/99", "123")
    service = CheckoutService()
    shopper = Shopper(session_id="c" * 20)
    PromoService().create(discount=10, code="KEEP", usage_limit=1)

    service.carts.add(shopper, 1)
    first = service.place_order(shopper, contact, payment)
    service.carts.add(shopper, 2)
    monkeypatch.setattr(service, "_order_number", lambda: first["number"])
    with pytest.raises(IntegrityError):
        service.place_order(shopper, contact, payment, promo_code="KEEP")

    assert SQLRepository().get_promo("KEEP").usage_count == 0
    assert [line.product["id"] for line in service.carts.lines(shopper)] == [2]
