def test_anonymous_cart_gets_cookie_and_starts_empty(client):
    resp = client.get("/api/cart")
    assert resp.status_code == 200
    assert resp.json()["items"] == []
    assert resp.json()["subtotal"] == 0
    assert "cart_session" in resp.cookies


def test_add_merges_quantity_and_reports(client):
    resp = client.post("/api/cart/items", json={"productId": 4})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Added Corsair Vengeance RGB 32GB to your cart"
    assert body["cart"]["itemCount"] == 1

    resp = client.post("/api/cart/items", json={"productId": 4, "quantity": 2})
    body = resp.json()
    assert body["message"] == "Updated Corsair Vengeance RGB 32GB quantity in your cart"
    assert body["cart"]["items"][0]["quantity"] == 3
    assert body["cart"]["subtotal"] == 389.97
    assert body["cart"]["formattedSubtotal"] == "$389.97"


def test_add_rejects_unknown_product_and_bad_quantity(client):
    assert client.post("/api/cart/items", json={"productId": 999}).status_code == 404
    assert client.post("/api/cart/items", json={"productId": 1, "quantity": 0}).status_code == 422


def test_out_of_stock_product_cannot_be_added(client):
    from storefront.repositories.sql_repository import SQLRepository

    SQLRepository().update_product(5, {"in_stock": False})
    resp = client.post("/api/cart/items", json={"productId": 5})
    assert resp.status_code == 409


def test_update_quantity_messages(client):
    client.post("/api/cart/items", json={"productId": 3})
    resp = client.patch("/api/cart/items/3", json={"quantity": 4})
    assert resp.json()["message"] == "Increased Samsung 990 PRO SSD 2TB quantity to 4"
    resp = client.patch("/api/cart/items/3", json={"quantity": 2})
    assert resp.json()["message"] == "Decreased Samsung 990 PRO SSD 2TB quantity to 2"
    resp = client.patch("/api/cart/items/3", json={"quantity": 2})
    assert resp.json()["message"] is None
    assert client.patch("/api/cart/items/3", json={"quantity": 0}).status_code == 422
    assert client.patch("/api/cart/items/8", json={"quantity": 1}).status_code == 404


def test_remove_and_clear(client):
    client.post("/api/cart/items", json={"productId": 3})
    client.post("/api/cart/items", json={"productId": 12})
    resp = client.delete("/api/cart/items/3")
    assert resp.json()["message"] == "Removed Samsung 990 PRO SSD 2TB from your cart"
    assert [i["product"]["id"] for i in resp.json()["cart"]["items"]] == [12]
    assert client.delete("/api/cart/items/3").status_code == 404

    resp = client.delete("/api/cart")
    assert resp.json()["message"] == "Your cart has been cleared"
    assert resp.json()["cart"]["items"] == []
    assert client.delete("/api/cart").json()["message"] is None


def test_cart_in_egp(client):
    client.post("/api/cart/items", json={"productId": 4})
    body = client.get("/api/cart", params={"currency": "EGP"}).json()
    assert body["currency"] == "EGP"
    assert body["subtotal"] == 4029.69
    assert body["formattedSubtotal"] == "4029.69 EGP"
    assert client.get("/api/cart", params={"currency": "XYZ"}).status_code == 400


def test_carts_are_isolated_per_session(client, seeded_db):
    from fastapi.testclient import TestClient

    from storefront.app import create_app

    client.post("/api/cart/items", json={"productId": 1})
    with TestClient(create_app()) as other:
        assert other.get("/api/cart").json()["items"] == []


def test_line_quantity_is_capped_when_adding_repeatedly(client):
    client.post("/api/cart/items", json={"productId": 3, "quantity": 99})
    resp = client.post("/api/cart/items", json={"productId": 3, "quantity": 99})
    assert resp.status_code == 201
    assert resp.json()["cart"]["items"][0]["quantity"] == 99
    assert client.post("/api/cart/items", json={"productId": 3, "quantity": 100}).status_code == 422
