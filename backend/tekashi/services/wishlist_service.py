"""
Wishlist Service
Ownership, items and public sharing of wishlists

Author: Tekashi
Date: 2025-10-31
"""
import logging
from typing import Optional

from psycopg2 import errors as pg_errors

from tekashi.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from tekashi.domain.user import User
from tekashi.domain.wishlist import (
    ShareUpdate,
    Wishlist,
    WishlistItem,
    WishlistItemCreate,
    WishlistItemUpdate,
    WishlistUpdate,
    generate_share_code,
)
from tekashi.repositories.product_repository import ProductRepository
from tekashi.repositories.wishlist_repository import WishlistRepository

logger = logging.getLogger(__name__)

SHARE_CODE_ATTEMPTS = 5


class WishlistService:
    """Wishlist rules on top of WishlistRepository"""

    def __init__(
        self,
        wishlist_repository: Optional[WishlistRepository] = None,
        product_repository: Optional[ProductRepository] = None
    ):
        self.wishlists = wishlist_repository or WishlistRepository()
        self.products = product_repository or ProductRepository()

    def _get(self, wishlist_id: int) -> Wishlist:
        wishlist = self.wishlists.find_by_id(wishlist_id)
        if wishlist is None:
            raise NotFoundError(f"Wishlist {wishlist_id} not found")
        return wishlist

    def get_owned(self, wishlist_id: int, account: User) -> Wishlist:
        wishlist = self._get(wishlist_id)
        if wishlist.user_id != account.id:
            raise PermissionDeniedError("You can only manage your own wishlists")
        return wishlist

    def view(self, wishlist_id: int, account: Optional[User] = None) -> Wishlist:
        """Owner, or anyone when the list is public; visits by others are counted"""
        wishlist = self._get(wishlist_id)
        is_owner = account is not None and wishlist.user_id == account.id

        if not is_owner and not wishlist.is_public:
            raise PermissionDeniedError("This wishlist is private")

        if not is_owner:
            self.wishlists.record_view(wishlist.id)
            wishlist.views += 1
        return wishlist

    def update(self, wishlist_id: int, account: User, data: WishlistUpdate) -> Wishlist:
        self.get_owned(wishlist_id, account)
        self.wishlists.update(wishlist_id, data.model_dump(exclude_unset=True))
        return self._get(wishlist_id)

    def delete(self, wishlist_id: int, account: User) -> None:
        self.get_owned(wishlist_id, account)
        self.wishlists.deactivate(wishlist_id)

    # Items

    def add_item(self, wishlist_id: int, account: User, data: WishlistItemCreate) -> WishlistItem:
        self.get_owned(wishlist_id, account)

        product = self.products.find_by_id(data.product_id)
        if product is None or not product.is_active:
            raise NotFoundError(f"Product {data.product_id} not found")

        item = self.wishlists.add_item(wishlist_id, data)
        if item is None:
            raise ConflictError("Product is already in this wishlist")
        item.product = product
        return item

    def update_item(
        self, wishlist_id: int, product_id: int, account: User, data: WishlistItemUpdate
    ) -> WishlistItem:
        self.get_owned(wishlist_id, account)
        item = self.wishlists.update_item(wishlist_id, product_id, data.model_dump(exclude_unset=True))
        if item is None:
            raise NotFoundError(f"Product {product_id} is not in this wishlist")
        return item

    def remove_item(self, wishlist_id: int, product_id: int, account: User) -> None:
        self.get_owned(wishlist_id, account)
        if not self.wishlists.remove_item(wishlist_id, product_id):
            raise NotFoundError(f"Product {product_id} is not in this wishlist")

    # Sharing

    def _store_new_code(self, wishlist_id: int, extra_fields: dict) -> str:
        """Assign a fresh share code, retrying on the rare unique-index collision"""
        for _ in range(SHARE_CODE_ATTEMPTS):
            code = generate_share_code()
            try:
                self.wishlists.update(wishlist_id, {**extra_fields, 'share_code': code})
                return code
            except pg_errors.UniqueViolation:
                logger.warning(f"Share code collision for wishlist {wishlist_id}, retrying")
        raise ValidationError("Could not generate a unique share code")

    def configure_sharing(self, wishlist_id: int, account: User, data: ShareUpdate) -> Wishlist:
        wishlist = self.get_owned(wishlist_id, account)
        fields = {
            'is_public': data.is_public,
            'share_expires_at': data.expires_at,
            'share_max_uses': data.max_uses,
        }

        if data.is_public and not wishlist.share.code:
            self._store_new_code(wishlist_id, fields)
        else:
            self.wishlists.update(wishlist_id, fields)
        return self._get(wishlist_id)

    def regenerate_code(self, wishlist_id: int, account: User) -> Wishlist:
        """New code; earlier links stop working and the use counter restarts"""
        self.get_owned(wishlist_id, account)
        self._store_new_code(wishlist_id, {'share_use_count': 0})
        return self._get(wishlist_id)

    def find_shared(self, code: str) -> Wishlist:
        """Public lookup by share code; consumes one use"""
        wishlist = self.wishlists.find_by_share_code(code)
        if wishlist is None or not wishlist.can_share():
            raise NotFoundError("Shared wishlist not found or no longer available")

        if not self.wishlists.consume_share_use(wishlist.id):
            raise NotFoundError("Shared wishlist not found or no longer available")
        wishlist.views += 1
        wishlist.share.use_count += 1
        return wishlist
