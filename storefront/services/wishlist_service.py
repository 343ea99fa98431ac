"""Wishlist use cases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from storefront.repositories.sql_repository import SQLRepository
from storefront.services.catalog_service import ProductNotFoundError, product_to_dict
from storefront.services.session_service import Shopper


class WishlistItemNotFoundError(Exception):
    pass


@dataclass
class WishlistResult:
    wishlist: dict
    message: Optional[str]
    added: bool = False


class WishlistService:
    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def view(self, shopper: Shopper) -> dict:
        items = [product_to_dict(item.product) for item in self.repository.list_wishlist(shopper.owner_key)]
        return {"items": items, "count": len(items)}

    def contains(self, shopper: Shopper, product_id: int) -> bool:
        return self.repository.wishlist_contains(shopper.owner_key, product_id)

    def add(self, shopper: Shopper, product_id: int) -> WishlistResult:
        product = self.repository.get_product(product_id)
        if not product:
            raise ProductNotFoundError("Product not found")
        added = self.repository.add_wishlist_item(shopper.owner_key, product_id)
        if added:
            message = f"Added {product.name} to your wishlist"
        else:
            message = f"{product.name} is already in your wishlist"
        return WishlistResult(self.view(shopper), message, added)

    def remove(self, shopper: Shopper, product_id: int) -> WishlistResult:
        product = self.repository.get_product(product_id)
        if not product or not self.repository.remove_wishlist_item(shopper.owner_key, product_id):
            raise WishlistItemNotFoundError("Product is not in your wishlist")
        return WishlistResult(self.view(shopper), f"Removed {product.name} from your wishlist")

    def clear(self, shopper: Shopper) -> WishlistResult:
        removed = self.repository.clear_wishlist(shopper.owner_key)
        message = "Your wishlist has been cleared" if removed else None
        return WishlistResult(self.view(shopper), message)

    def merge_on_login(self, session_id: str | None, user_id: int) -> int:
        if not session_id:
            return 0
        source = Shopper(session_id=session_id).owner_key
        target = Shopper(user_id=user_id).owner_key
        return self.repository.merge_wishlist(source, target)
