from storefront.core.security import hash_password, verify_password


def test_password_hash_roundtrip():
    stored = hash_password("correct horse")
    assert stored.startswith("argon2$")
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong", stored)
    assert not verify_password("anything", None)
    assert not verify_password("anything", "argon2$garbage")


def test_register_login_me_logout(client):
    resp = client.post("/api/auth/register", json={"username": "Carol", "password": "longenough"})
    assert resp.status_code == 201
    assert resp.json()["user"]["username"] == "carol"
    assert resp.json()["user"]["role"] == "customer"
    assert client.get("/api/auth/me").json()["user"]["username"] == "carol"

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401

    resp = client.post("/api/auth/login", json={"username": "carol", "password": "longenough"})
    assert resp.status_code == 200
    assert client.get("/api/auth/me").status_code == 200


def test_register_validation(client):
    assert client.post("/api/auth/register", json={"username": "ab", "password": "longenough"}).status_code == 400
    assert client.post("/api/auth/register", json={"username": "admin", "password": "longenough"}).status_code == 400
    assert client.post("/api/auth/register", json={"username": "dave", "password": "short"}).status_code == 400
    client.post("/api/auth/register", json={"username": "dave", "password": "longenough"})
    client.post("/api/auth/logout")
    resp = client.post("/api/auth/register", json={"username": "dave", "password": "longenough"})
    assert resp.status_code == 409


def test_bad_credentials(client):
    client.post("/api/auth/register", json={"username": "erin", "password": "longenough"})
    client.post("/api/auth/logout")
    resp = client.post("/api/auth/login", json={"username": "erin", "password": "wrongpass"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid username or password"


def test_login_is_rate_limited(client):
    statuses = [
        client.post("/api/auth/login", json={"username": "nobody", "password": "whatever1"}).status_code
        for _ in range(11)
    ]
    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429


def test_anonymous_cart_and_wishlist_follow_the_user(client):
    client.post("/api/auth/register", json={"username": "frank", "password": "longenough"})
    client.post("/api/cart/items", json={"productId": 2})
    client.post("/api/auth/logout")

    client.post("/api/cart/items", json={"productId": 2, "quantity": 2})
    client.post("/api/cart/items", json={"productId": 11})
    client.post("/api/wishlist/items", json={"productId": 8})

    client.post("/api/auth/login", json={"username": "frank", "password": "longenough"})
    cart = client.get("/api/cart").json()
    assert {i["product"]["id"]: i["quantity"] for i in cart["items"]} == {2: 3, 11: 1}
    assert [p["id"] for p in client.get("/api/wishlist").json()["items"]] == [8]


def test_login_merge_keeps_line_quantity_capped(client):
    client.post("/api/auth/register", json={"username": "gina", "password": "longenough"})
    client.post("/api/cart/items", json={"productId": 5, "quantity": 80})
    client.post("/api/auth/logout")
    client.post("/api/cart/items", json={"productId": 5, "quantity": 50})
    client.post("/api/auth/login", json={"username": "gina", "password": "longenough"})
    items = client.get("/api/cart").json()["items"]
    assert [(i["product"]["id"], i["quantity"]) for i in items] == [(5, 99)]
