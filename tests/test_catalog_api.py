def _ids(items):
    return [item["id"] for item in items]


def test_list_and_get_product(client):
    resp = client.get("/api/products")
    assert resp.status_code == 200
    products = resp.json()
    assert _ids(products) == list(range(1, 13))
    first = products[0]
    assert first["name"] == "NVIDIA GeForce RTX 4080 Super"
    assert first["price"] == 899.99
    assert first["inStock"] is True
    assert isinstance(first["specifications"], dict)

    resp = client.get("/api/products/7")
    assert resp.status_code == 200
    assert resp.json()["category"] == "Power Supplies"


def test_unknown_or_malformed_product_id_is_404(client):
    assert client.get("/api/products/999").status_code == 404
    resp = client.get("/api/products/abc")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Product not found"}


def test_static_routes_win_over_product_id(client):
    resp = client.get("/api/products/search", params={"q": "samsung"})
    assert resp.status_code == 200
    assert _ids(resp.json()) == [3, 9]


def test_search_requires_query(client):
    resp = client.get("/api/products/search")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Search query is required"
    assert client.get("/api/products/search", params={"q": ""}).status_code == 400


def test_whitespace_query_is_a_plain_substring_search(client):
    resp = client.get("/api/products/search", params={"q": " "})
    assert resp.status_code == 200
    assert 1 in _ids(resp.json())


def test_featured_new_and_discounted(client):
    assert _ids(client.get("/api/products/featured").json()) == [1, 2, 3, 4, 10]
    assert _ids(client.get("/api/products/new").json()) == [5, 6, 8, 11]
    assert _ids(client.get("/api/products/discounted").json()) == [1, 2, 4, 12, 7, 9]


def test_products_by_category_slug(client):
    assert _ids(client.get("/api/products/category/power-supplies").json()) == [7]
    assert _ids(client.get("/api/products/category/CPUs").json()) == [2, 10]
    assert client.get("/api/products/category/laptops").json() == []


def test_similar_products(client):
    assert _ids(client.get("/api/products/3/similar").json()) == [12]
    assert _ids(client.get("/api/products/2/similar").json()) == [10]
    assert client.get("/api/products/999/similar").json() == []
    assert client.get("/api/products/2/similar", params={"limit": 0}).json() == []


def test_filter_products(client):
    resp = client.get("/api/products/filter", params={"category": "power-supplies"})
    body = resp.json()
    assert _ids(body["products"]) == [7]
    assert body["total"] == 1
    assert body["priceRange"] == {"min": 129.99, "max": 1299.99}
    assert "NVIDIA" in body["brands"]

    resp = client.get("/api/products/filter", params=[("brands", "AMD"), ("brands", "Intel")])
    assert _ids(resp.json()["products"]) == [2, 10]

    resp = client.get(
        "/api/products/filter",
        params={"minPrice": 500, "maxPrice": 900, "sortBy": "price-low"},
    )
    assert _ids(resp.json()["products"]) == [2, 10, 1]

    resp = client.get("/api/products/filter", params={"sortBy": "deals"})
    assert _ids(resp.json()["products"]) == [1, 2, 4, 12, 7, 9]

    resp = client.get("/api/products/filter")
    assert _ids(resp.json()["products"]) == [1, 2, 3, 4, 10, 5, 6, 7, 8, 9, 11, 12]


def test_categories(client):
    names = client.get("/api/categories").json()
    assert names[:3] == ["GPUs", "CPUs", "Storage"]
    assert len(names) == 10

    details = {c["slug"]: c for c in client.get("/api/categories/details").json()}
    assert details["power-supplies"]["productCount"] == 1
    assert details["laptops"]["productCount"] == 0

    resp = client.get("/api/categories/storage")
    assert resp.status_code == 200
    assert resp.json()["productCount"] == 2
    assert client.get("/api/categories/toasters").status_code == 404


def test_currency_endpoints(client):
    codes = [c["code"] for c in client.get("/api/currencies").json()]
    assert codes == ["USD", "EGP"]
    resp = client.get("/api/currencies/convert", params={"amount": 10, "currency": "egp"})
    assert resp.json()["amount"] == 310.0
    assert resp.json()["formatted"] == "310.00 EGP"
    assert client.get("/api/currencies/convert", params={"amount": 10, "currency": "EUR"}).status_code == 400


def test_health_and_security_headers(client):
    resp = client.get("/api/health")
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
