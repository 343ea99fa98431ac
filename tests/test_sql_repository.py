"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from storefront.repositories.catalog_seed import seed_catalog
from storefront.repositories.sql_repository import SQLRepository


def _order_values(number: str, owner_key: str = "session:abc", minutes_ago: int = 0) -> dict:
    return {
        "number": number,
        "owner_key": owner_key,
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "address": "12 Analytical St",
        "city": "London",
        "state": "LDN",
        "zip_code": "12345",
        "shipping_method": "standard",
        "card_last4": "4242",
        "subtotal": 100.0,
        "discount": 0.0,
        "tax": 10.0,
        "shipping": 0.0,
        "total": 110.0,
        "items": [],
        "created_at": datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    }


def test_seed_only_fills_empty_tables(temp_db):
    repo = SQLRepository()
    first = seed_catalog(repo)
    assert first == {"products": 12, "categories": 12, "articles": 8}
    assert seed_catalog(repo) == {"products": 0, "categories": 0, "articles": 0}
    assert repo.count_products() == 12
    assert repo.next_product_id() == 13


def test_force_seed_restores_products(seeded_db):
    repo = SQLRepository()
    repo.delete_product(1)
    repo.update_product(2, {"price": 1.0})
    counts = seed_catalog(repo, force=True)
    assert counts["products"] == 12
    assert repo.get_product(1) is not None
    assert repo.get_product(2).price == 549.99


def test_cart_lines_merge_into_user_cart(seeded_db):
    repo = SQLRepository()
    user = repo.create_user("alice", "hash")
    anon = repo.get_or_create_cart(session_id="s" * 20)
    mine = repo.get_or_create_cart(user_id=user.id)
    repo.add_cart_item(anon.id, 1, 2)
    repo.add_cart_item(anon.id, 3, 1)
    repo.add_cart_item(mine.id, 1, 1)

    assert repo.add_cart_item(anon.id, 3, 4) == (5, False)
    assert repo.merge_session_cart_into_user("s" * 20, user.id) == 2
    assert repo.find_cart(session_id="s" * 20) is None
    quantities = {item.product_id: item.quantity for item in repo.get_cart_items(mine.id)}
    assert quantities == {1: 3, 3: 5}


def test_deleting_product_drops_cart_and_wishlist_lines(seeded_db):
    repo = SQLRepository()
    cart = repo.get_or_create_cart(session_id="t" * 20)
    repo.add_cart_item(cart.id, 4, 1)
    repo.add_wishlist_item("session:" + "t" * 20, 4)
    assert repo.delete_product(4)
    assert repo.get_cart_items(cart.id) == []
    assert not repo.wishlist_contains("session:" + "t" * 20, 4)
    assert not repo.delete_product(4)


def test_wishlist_is_unique_per_owner(seeded_db):
    repo = SQLRepository()
    assert repo.add_wishlist_item("user:1", 5)
    assert not repo.add_wishlist_item("user:1", 5)
    assert repo.add_wishlist_item("user:2", 5)
    assert repo.merge_wishlist("user:2", "user:1") == 0
    assert [item.product_id for item in repo.list_wishlist("user:1")] == [5]
    assert repo.list_wishlist("user:2") == []


def test_promo_orders_stop_at_usage_limit(seeded_db):
    repo = SQLRepository()
    repo.create_promo(
        {
            "code": "MEDTECHAAAAAA",
            "discount": 10.0,
            "type": "percentage",
            "usage_limit": 2,
            "usage_count": 0,
            "product_ids": [],
            "created_at": datetime.now(timezone.utc),
        }
    )
    assert repo.create_order(_order_values("SW-1", minutes_ago=5), promo_code="MEDTECHAAAAAA")
    assert repo.create_order(_order_values("SW-2"), promo_code="MEDTECHAAAAAA")
    assert repo.create_order(_order_values("SW-3"), promo_code="MEDTECHAAAAAA") is None
    assert repo.get_promo("MEDTECHAAAAAA").usage_count == 2
    assert repo.get_order("SW-3") is None
    assert [o.number for o in repo.list_all_orders()] == ["SW-2", "SW-1"]


def test_expired_sessions_are_purged(seeded_db):
    repo = SQLRepository()
    user = repo.create_user("bob", "hash")
    old = repo.create_user_session(user.id, datetime.now(timezone.utc) - timedelta(hours=1))
    fresh = repo.create_user_session(user.id, datetime.now(timezone.utc) + timedelta(hours=1))
    assert repo.delete_expired_sessions() == 1
    assert repo.get_user_session(old) is None
    assert repo.get_user_session(fresh) is not None


def test_newsletter_subscriber_is_unique(seeded_db):
    repo = SQLRepository()
    assert repo.add_newsletter_subscriber("a@example.com")
    assert not repo.add_newsletter_subscriber("a@example.com")


def test_merged_cart_lines_respect_quantity_cap(seeded_db):
    repo = SQLRepository()
    user = repo.create_user("carl", "hash")
    anon = repo.get_or_create_cart(session_id="m" * 20)
    mine = repo.get_or_create_cart(user_id=user.id)
    repo.add_cart_item(anon.id, 2, 60, 99)
    repo.add_cart_item(mine.id, 2, 70, 99)
    assert repo.merge_session_cart_into_user("m" * 20, user.id, 99) == 1
    assert [item.quantity for item in repo.get_cart_items(mine.id)] == [99]


def test_deleting_user_keeps_orders(seeded_db):
    repo = SQLRepository()
    user = repo.create_user("carol", "hash")
    owner = f"user:{user.id}"
    token = repo.create_user_session(user.id, datetime.now(timezone.utc) + timedelta(hours=1))
    cart = repo.get_or_create_cart(user_id=user.id)
    repo.add_cart_item(cart.id, 1, 2)
    repo.add_wishlist_item(owner, 3)
    repo.create_order(_order_values("SW-9", owner_key=owner))

    assert repo.delete_user(user.id, owner)
    assert repo.get_user(user.id) is None
    assert repo.get_user_session(token) is None
    assert repo.find_cart(user_id=user.id) is None
    assert repo.get_cart_items(cart.id) == []
    assert repo.list_wishlist(owner) == []
    assert [o.number for o in repo.list_orders(owner)] == ["SW-9"]
    assert not repo.delete_user(user.id, owner)
