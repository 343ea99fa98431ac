def test_articles_list_newest_first_without_content(client):
    articles = client.get("/api/articles").json()
    assert len(articles) == 8
    assert articles[0]["title"] == "NVIDIA Announces Next-Gen RTX 5000 Series GPUs"
    assert articles[0]["date"] == "June 10, 2023"
    assert articles[0]["publishedOn"] == "2023-06-10"
    assert "content" not in articles[0]
    dates = [a["publishedOn"] for a in articles]
    assert dates == sorted(dates, reverse=True)


def test_articles_filter_and_search(client):
    assert len(client.get("/api/articles", params={"category": "CPUs"}).json()) == 2
    assert client.get("/api/articles", params={"category": "cpus"}).json() == []
    found = client.get("/api/articles", params={"q": "quantum"}).json()
    assert [a["category"] for a in found] == ["Quantum"]
    assert client.get("/api/articles/categories").json()[0] == "Hardware"


def test_article_detail(client):
    article = client.get("/api/articles/1").json()
    assert article["content"].startswith("<p>")
    assert client.get("/api/articles/999").status_code == 404
    assert client.get("/api/articles/xyz").status_code == 404


def test_newsletter_subscription(client):
    resp = client.post("/api/newsletter", json={"email": "Reader@Example.com"})
    assert resp.status_code == 201
    resp = client.post("/api/newsletter", json={"email": "reader@example.com"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "You are already subscribed"
    assert client.post("/api/newsletter", json={"email": "nope"}).status_code == 400


def test_contact_message_is_stored(client):
    payload = {"name": "Hal", "email": "hal@example.com", "subject": "Order", "message": "Where is it?"}
    resp = client.post("/api/contact", json=payload)
    assert resp.status_code == 201
    assert resp.json()["emailSent"] is False
    assert isinstance(resp.json()["id"], int)
    resp = client.post("/api/contact", json={**payload, "message": "  "})
    assert resp.status_code == 400


def test_contact_forwards_to_recipient(client, monkeypatch):
    from storefront.core import config as core_config
    from storefront.services import contact_service

    sent = []
    monkeypatch.setenv("CONTACT_RECIPIENT", "support@example.com")
    core_config.get_settings.cache_clear()
    monkeypatch.setattr(contact_service, "send_email", lambda *args, **kwargs: sent.append(args) or True)
    payload = {"name": "Ivy", "email": "ivy@example.com", "subject": "Hi", "message": "Hello"}
    resp = client.post("/api/contact", json=payload)
    assert resp.json()["emailSent"] is True
    assert sent[0][1] == "support@example.com"
