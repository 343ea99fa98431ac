"""
Cart use cases. Each mutation returns the refreshed cart plus the short
notification message the storefront shows to the shopper.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from storefront.core.utils import round_money
from storefront.domain import pricing
from storefront.repositories.sql_repository import SQLRepository
from storefront.services.catalog_service import ProductNotFoundError, product_to_dict
from storefront.services.currency_service import money
from storefront.services.session_service import Shopper

logger = logging.getLogger(__name__)

MAX_LINE_QUANTITY = 99


class CartError(Exception):
    status_code = 400


class ProductUnavailableError(CartError):
    status_code = 409


class CartItemNotFoundError(CartError):
    status_code = 404


@dataclass
class CartLine:
    product: dict
    quantity: int

    @property
    def line_total(self) -> float:
        return round_money(self.product["price"] * self.quantity)


@dataclass
class CartResult:
    cart: dict
    message: Optional[str]


class CartService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def _cart(self, shopper: Shopper, *, create: bool = True):
        if create:
            return self.repository.get_or_create_cart(user_id=shopper.user_id, session_id=shopper.session_id)
        return self.repository.find_cart(user_id=shopper.user_id, session_id=shopper.session_id)

    def lines(self, shopper: Shopper) -> list[CartLine]:
        cart = self._cart(shopper, create=False)
        if not cart:
            return []
        return [
            CartLine(product=product_to_dict(item.product), quantity=int(item.quantity))
            for item in self.repository.get_cart_items(cart.id)
        ]

    def view(self, shopper: Shopper, currency: str = pricing.BASE_CURRENCY) -> dict:
        lines = self.lines(shopper)
        subtotal = round_money(sum(line.line_total for line in lines))
        return {
            "items": [
                {
                    "product": line.product,
                    "quantity": line.quantity,
                    "lineTotal": money(line.line_total, currency)["amount"],
                }
                for line in lines
            ],
            "itemCount": sum(line.quantity for line in lines),
            "currency": currency,
            "subtotal": money(subtotal, currency)["amount"],
            "formattedSubtotal": money(subtotal, currency)["formatted"],
        }

    def _line_for(self, shopper: Shopper, product_id: int):
        cart = self._cart(shopper, create=False)
        item = self.repository.get_cart_item(cart.id, product_id) if cart else None
        if not item:
            raise CartItemNotFoundError("Product is not in your cart")
        return cart, item

    def add(
        self, shopper: Shopper, product_id: int, quantity: int = 1, *, currency: str = pricing.BASE_CURRENCY
    ) -> CartResult:
        product = self.repository.get_product(product_id)
        if not product:
            raise ProductNotFoundError("Product not found")
        if not product.in_stock:
            raise ProductUnavailableError(f"{product.name} is out of stock")
        cart = self._cart(shopper)
        _, created = self.repository.add_cart_item(cart.id, product_id, quantity, MAX_LINE_QUANTITY)
        if created:
            message = f"Added {product.name} to your cart"
        else:
            message = f"Updated {product.name} quantity in your cart"
        return CartResult(self.view(shopper, currency), message)

    def update_quantity(
        self, shopper: Shopper, product_id: int, quantity: int, *, currency: str = pricing.BASE_CURRENCY
    ) -> CartResult:
        cart, item = self._line_for(shopper, product_id)
        previous = int(item.quantity)
        self.repository.set_cart_item_quantity(cart.id, product_id, quantity)
        name = item.product.name
        if quantity > previous:
            message = f"Increased {name} quantity to {quantity}"
        elif quantity < previous:
            message = f"Decreased {name} quantity to {quantity}"
        else:
            message = None
        return CartResult(self.view(shopper, currency), message)

    def remove(self, shopper: Shopper, product_id: int, *, currency: str = pricing.BASE_CURRENCY) -> CartResult:
        cart, item = self._line_for(shopper, product_id)
        self.repository.delete_cart_item(cart.id, product_id)
        return CartResult(self.view(shopper, currency), f"Removed {item.product.name} from your cart")

    def clear(self, shopper: Shopper, *, currency: str = pricing.BASE_CURRENCY) -> CartResult:
        cart = self._cart(shopper, create=False)
        removed = self.repository.clear_cart(cart.id) if cart else 0
        message = "Your cart has been cleared" if removed else None
        return CartResult(self.view(shopper, currency), message)

    def merge_on_login(self, session_id: str | None, user_id: int) -> int:
        if not session_id:
            return 0
        moved = self.repository.merge_session_cart_into_user(session_id, user_id, MAX_LINE_QUANTITY)
        if moved:
            logger.info("Merged %s cart line(s) into user %s", moved, user_id)
        return moved
