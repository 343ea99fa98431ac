"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from storefront.db.models import (
    Article,
    Cart,
    CartItem,
    Category,
    ContactMessage,
    NewsletterSubscriber,
    Order,
    Product,
    PromoCode,
    User,
    UserSession,
    WishlistItem,
)
from storefront.db.session import get_session


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- products --------------------------
    def list_products(self) -> list[Product]:
        with get_session() as session:
            return session.execute(select(Product).order_by(Product.id)).scalars().all()

    def get_product(self, product_id: int) -> Optional[Product]:
        with get_session() as session:
            return session.get(Product, product_id)

    def count_products(self) -> int:
        with get_session() as session:
            return int(session.execute(select(func.count(Product.id))).scalar_one())

    def next_product_id(self) -> int:
        with get_session() as session:
            current = session.execute(select(func.max(Product.id))).scalar_one()
            return int(current or 0) + 1

    def create_product(self, values: dict) -> Product:
        entity = Product(**values)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_product(self, product_id: int, values: dict) -> Optional[Product]:
        with get_session() as session:
            entity = session.get(Product, product_id)
            if not entity:
                return None
            for key, value in values.items():
                setattr(entity, key, value)
            session.commit()
            session.refresh(entity)
            return entity

    def delete_product(self, product_id: int) -> bool:
        with get_session() as session:
            result = session.execute(delete(Product).where(Product.id == product_id))
            session.execute(delete(CartItem).where(CartItem.product_id == product_id))
            session.execute(delete(WishlistItem).where(WishlistItem.product_id == product_id))
            session.commit()
            return result.rowcount > 0

    def replace_products(self, rows: Iterable[dict]) -> int:
        """Drop every product (and lines pointing at them) and insert rows."""
        with get_session() as session:
            session.execute(delete(CartItem))
            session.execute(delete(WishlistItem))
            session.execute(delete(Product))
            count = 0
            for values in rows:
                session.add(Product(**values))
                count += 1
            session.commit()
            return count

    # -------------------------- categories --------------------------
    def list_categories(self) -> list[Category]:
        with get_session() as session:
            return session.execute(select(Category).order_by(Category.id)).scalars().all()

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        with get_session() as session:
            stmt = select(Category).where(Category.slug == (slug or "").strip().lower())
            return session.execute(stmt).scalar_one_or_none()

    def count_categories(self) -> int:
        with get_session() as session:
            return int(session.execute(select(func.count(Category.id))).scalar_one())

    def create_category(self, values: dict) -> Category:
        entity = Category(**values)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    # -------------------------- articles --------------------------
    def list_articles(self) -> list[Article]:
        with get_session() as session:
            stmt = select(Article).order_by(Article.published_on.desc(), Article.id)
            return session.execute(stmt).scalars().all()

    def get_article(self, article_id: int) -> Optional[Article]:
        with get_session() as session:
            return session.get(Article, article_id)

    def count_articles(self) -> int:
        with get_session() as session:
            return int(session.execute(select(func.count(Article.id))).scalar_one())

    def create_article(self, values: dict) -> Article:
        entity = Article(**values)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.username == username)
            return session.execute(stmt).scalar_one_or_none()

    def create_user(self, username: str, password_hash: str, role: str = "customer") -> User:
        entity = User(username=username, password_hash=password_hash, role=role)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_user_role(self, user_id: int, role: str) -> None:
        with get_session() as session:
            session.execute(update(User).where(User.id == user_id).values(role=role))
            session.commit()

    def update_user_password(self, user_id: int, password_hash: str) -> None:
        with get_session() as session:
            session.execute(update(User).where(User.id == user_id).values(password_hash=password_hash))
            session.commit()

    def list_users(self) -> list[User]:
        with get_session() as session:
            return session.execute(select(User).order_by(User.id)).scalars().all()

    def delete_user(self, user_id: int, owner_key: str) -> bool:
        """Remove a user with their sessions, cart and wishlist. Orders are kept."""
        with get_session() as session:
            carts = select(Cart.id).where(Cart.user_id == user_id)
            session.execute(delete(CartItem).where(CartItem.cart_id.in_(carts)))
            session.execute(delete(Cart).where(Cart.user_id == user_id))
            session.execute(delete(WishlistItem).where(WishlistItem.owner_key == owner_key))
            session.execute(delete(UserSession).where(UserSession.user_id == user_id))
            result = session.execute(delete(User).where(User.id == user_id))
            session.commit()
            return result.rowcount > 0

    # -------------------------- sessions --------------------------
    def create_user_session(self, user_id: int, expires_at: datetime) -> str:
        token = secrets.token_urlsafe(32)
        with get_session() as session:
            session.add(UserSession(token=token, user_id=user_id, expires_at=expires_at))
            session.commit()
        return token

    def get_user_session(self, token: str) -> Optional[UserSession]:
        with get_session() as session:
            return session.get(UserSession, token)

    def delete_user_session(self, token: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.token == token))
            session.commit()

    def delete_expired_sessions(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        with get_session() as session:
            result = session.execute(delete(UserSession).where(UserSession.expires_at < now))
            session.commit()
            return result.rowcount

    # -------------------------- carts --------------------------
    def find_cart(self, *, user_id: int | None = None, session_id: str | None = None) -> Optional[Cart]:
        if user_id is None and not session_id:
            return None
        with get_session() as session:
            if user_id is not None:
                stmt = select(Cart).where(Cart.user_id == user_id)
            else:
                stmt = select(Cart).where(Cart.session_id == session_id)
            return session.execute(stmt).scalar_one_or_none()

    def get_or_create_cart(self, *, user_id: int | None = None, session_id: str | None = None) -> Cart:
        cart = self.find_cart(user_id=user_id, session_id=session_id)
        if cart:
            return cart
        now = datetime.now(timezone.utc)
        entity = Cart(
            user_id=user_id,
            session_id=None if user_id is not None else session_id,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError:
                # created concurrently by another request
                session.rollback()
                return self.find_cart(user_id=user_id, session_id=session_id)
            session.refresh(entity)
            return entity

    def get_cart_items(self, cart_id: int) -> list[CartItem]:
        with get_session() as session:
            stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id)
            return session.execute(stmt).scalars().unique().all()

    def get_cart_item(self, cart_id: int, product_id: int) -> Optional[CartItem]:
        with get_session() as session:
            stmt = select(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            return session.execute(stmt).scalars().unique().one_or_none()

    def add_cart_item(
        self, cart_id: int, product_id: int, quantity: int, max_quantity: int | None = None
    ) -> tuple[int, bool]:
        """Add quantity to a line, creating it when missing. Returns (new quantity, created).

        The summed quantity is capped at max_quantity when given.
        """
        with get_session() as session:
            stmt = select(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            item = session.execute(stmt).scalars().unique().one_or_none()
            created = item is None
            if created:
                item = CartItem(cart_id=cart_id, product_id=product_id, quantity=0)
                session.add(item)
            total = int(item.quantity or 0) + quantity
            item.quantity = min(total, max_quantity) if max_quantity else total
            self._touch_cart(session, cart_id)
            session.commit()
            return int(item.quantity), created

    def set_cart_item_quantity(self, cart_id: int, product_id: int, quantity: int) -> bool:
        with get_session() as session:
            stmt = (
                update(CartItem)
                .where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
                .values(quantity=quantity)
            )
            result = session.execute(stmt)
            self._touch_cart(session, cart_id)
            session.commit()
            return result.rowcount > 0

    def delete_cart_item(self, cart_id: int, product_id: int) -> bool:
        with get_session() as session:
            stmt = delete(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
            result = session.execute(stmt)
            self._touch_cart(session, cart_id)
            session.commit()
            return result.rowcount > 0

    def clear_cart(self, cart_id: int) -> int:
        with get_session() as session:
            result = session.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
            self._touch_cart(session, cart_id)
            session.commit()
            return result.rowcount

    def merge_session_cart_into_user(self, session_id: str, user_id: int, max_quantity: int | None = None) -> int:
        """Move an anonymous cart's lines into the user's cart, summing quantities."""
        source = self.find_cart(session_id=session_id)
        if not source:
            return 0
        target = self.get_or_create_cart(user_id=user_id)
        moved = 0
        for item in self.get_cart_items(source.id):
            self.add_cart_item(target.id, item.product_id, int(item.quantity), max_quantity)
            moved += 1
        with get_session() as session:
            session.execute(delete(CartItem).where(CartItem.cart_id == source.id))
            session.execute(delete(Cart).where(Cart.id == source.id))
            session.commit()
        return moved

    def delete_stale_session_carts(self, older_than: datetime) -> int:
        with get_session() as session:
            stale = select(Cart.id).where(Cart.user_id.is_(None), Cart.updated_at < older_than)
            ids = session.execute(stale).scalars().all()
            if not ids:
                return 0
            session.execute(delete(CartItem).where(CartItem.cart_id.in_(ids)))
            session.execute(delete(Cart).where(Cart.id.in_(ids)))
            session.commit()
            return len(ids)

    def _touch_cart(self, session, cart_id: int) -> None:
        session.execute(update(Cart).where(Cart.id == cart_id).values(updated_at=datetime.now(timezone.utc)))

    # -------------------------- wishlist --------------------------
    def list_wishlist(self, owner_key: str) -> list[WishlistItem]:
        with get_session() as session:
            stmt = select(WishlistItem).where(WishlistItem.owner_key == owner_key).order_by(WishlistItem.id)
            return session.execute(stmt).scalars().unique().all()

    def wishlist_contains(self, owner_key: str, product_id: int) -> bool:
        with get_session() as session:
            stmt = (
                select(WishlistItem.id)
                .where(WishlistItem.owner_key == owner_key, WishlistItem.product_id == product_id)
                .limit(1)
            )
            return session.execute(stmt).first() is not None

    def add_wishlist_item(self, owner_key: str, product_id: int) -> bool:
        if self.wishlist_contains(owner_key, product_id):
            return False
        with get_session() as session:
            session.add(WishlistItem(owner_key=owner_key, product_id=product_id))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
            return True

    def remove_wishlist_item(self, owner_key: str, product_id: int) -> bool:
        with get_session() as session:
            stmt = delete(WishlistItem).where(
                WishlistItem.owner_key == owner_key, WishlistItem.product_id == product_id
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0

    def clear_wishlist(self, owner_key: str) -> int:
        with get_session() as session:
            result = session.execute(delete(WishlistItem).where(WishlistItem.owner_key == owner_key))
            session.commit()
            return result.rowcount

    def merge_wishlist(self, from_key: str, to_key: str) -> int:
        moved = 0
        for item in self.list_wishlist(from_key):
            if self.add_wishlist_item(to_key, item.product_id):
                moved += 1
        self.clear_wishlist(from_key)
        return moved

    # -------------------------- promo codes --------------------------
    def get_promo(self, code: str) -> Optional[PromoCode]:
        with get_session() as session:
            return session.get(PromoCode, code)

    def list_promos(self) -> list[PromoCode]:
        with get_session() as session:
            stmt = select(PromoCode).order_by(PromoCode.created_at.desc(), PromoCode.code)
            return session.execute(stmt).scalars().all()

    def create_promo(self, values: dict) -> PromoCode:
        entity = PromoCode(**values)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def delete_promo(self, code: str) -> bool:
        with get_session() as session:
            result = session.execute(delete(PromoCode).where(PromoCode.code == code))
            session.commit()
            return result.rowcount > 0

    def _consume_promo(self, session, code: str) -> bool:
        """Increment usage unless the limit was reached in the meantime."""
        stmt = (
            update(PromoCode)
            .where(
                PromoCode.code == code,
                (PromoCode.usage_limit <= 0) | (PromoCode.usage_count < PromoCode.usage_limit),
            )
            .values(usage_count=PromoCode.usage_count + 1)
        )
        return session.execute(stmt).rowcount > 0

    # -------------------------- orders --------------------------
    def create_order(self, values: dict, promo_code: str | None = None) -> Optional[Order]:
        """Insert the order and count the promo use in one transaction.

        Returns None (nothing written) when the promo reached its limit.
        """
        entity = Order(**values)
        with get_session() as session:
            # an uncommitted promo increment is rolled back when the session closes
            if promo_code and not self._consume_promo(session, promo_code):
                return None
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def get_order(self, number: str) -> Optional[Order]:
        with get_session() as session:
            return session.get(Order, number)

    def list_orders(self, owner_key: str) -> list[Order]:
        with get_session() as session:
            stmt = select(Order).where(Order.owner_key == owner_key).order_by(Order.created_at.desc())
            return session.execute(stmt).scalars().all()

    def list_all_orders(self) -> list[Order]:
        with get_session() as session:
            return session.execute(select(Order).order_by(Order.created_at.desc())).scalars().all()

    # -------------------------- engagement --------------------------
    def add_newsletter_subscriber(self, email: str) -> bool:
        with get_session() as session:
            if session.get(NewsletterSubscriber, email):
                return False
            session.add(NewsletterSubscriber(email=email))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
            return True

    def create_contact_message(self, name: str, email: str, subject: str, message: str) -> ContactMessage:
        entity = ContactMessage(name=name, email=email, subject=subject, message=message)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity
