"""
Wishlist Domain Model

Named product lists a user can keep private or share with a code.

Author: Tekashi
Date: 2025-10-23
"""
import secrets
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from tekashi.domain.common import utcnow, ensure_aware, to_money
from tekashi.domain.product import Product


def generate_share_code() -> str:
    """8 upper-case hex characters"""
    return secrets.token_hex(4).upper()


class WishlistItem(BaseModel):
    """A product inside a wishlist"""
    id: Optional[int] = None
    wishlist_id: Optional[int] = None
    product_id: int
    notes: Optional[str] = Field(None, max_length=200)
    priority: int = Field(3, ge=1, le=5)
    quantity: int = Field(1, ge=1)
    added_at: Optional[datetime] = None
    product: Optional[Product] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(exclude={'product'})
        data['product'] = self.product.to_dict() if self.product else None
        return data


class ShareSettings(BaseModel):
    """
    Public sharing configuration

    max_uses = 0 means unlimited lookups.
    """
    code: Optional[str] = None
    expires_at: Optional[datetime] = None
    max_uses: int = Field(0, ge=0)
    use_count: int = Field(0, ge=0)


class NotifySettings(BaseModel):
    offers: bool = True
    stock: bool = True
    new_products: bool = False


class Wishlist(BaseModel):
    """
    Wishlist domain model

    Fields:
        id: Internal wishlist ID
        user_id: Owner
        name / description: Display data
        items: Products in the list
        is_active: Soft-delete flag
        is_public: Visible to anyone with the id or share code
        share: Share code settings
        notify: Alert preferences
        views / last_viewed_at: Visits by people other than the owner
    """

    id: int
    user_id: int
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    items: List[WishlistItem] = Field(default_factory=list)
    is_active: bool = True
    is_public: bool = False
    share: ShareSettings = Field(default_factory=ShareSettings)
    notify: NotifySettings = Field(default_factory=NotifySettings)
    views: int = Field(0, ge=0)
    last_viewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def can_share(self, now: Optional[datetime] = None) -> bool:
        """Public, has a code, not expired and under its use limit"""
        if not self.is_public or not self.share.code:
            return False
        now = now or utcnow()
        if self.share.expires_at and ensure_aware(self.share.expires_at) < now:
            return False
        if self.share.max_uses > 0 and self.share.use_count >= self.share.max_uses:
            return False
        return True

    def find_item(self, product_id: int) -> Optional[WishlistItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    @property
    def total_value(self) -> Decimal:
        """Sum of final price * quantity over active products"""
        total = Decimal("0")
        for item in self.items:
            if item.product and item.product.is_active:
                total += item.product.final_price * item.quantity
        return to_money(total)

    @property
    def items_on_offer(self) -> List[WishlistItem]:
        return [
            item for item in self.items
            if item.product and item.product.is_active and item.product.on_offer
        ]

    def to_dict(self) -> dict:
        data = self.model_dump(exclude={'items'})
        data['items'] = [item.to_dict() for item in self.items]
        data['item_count'] = len(self.items)
        data['total_value'] = float(self.total_value)
        data['items_on_offer'] = len(self.items_on_offer)
        data['can_share'] = self.can_share()
        return data


class WishlistCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_public: bool = False
    notify: NotifySettings = Field(default_factory=NotifySettings)


class WishlistUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    notify: Optional[NotifySettings] = None


class WishlistItemCreate(BaseModel):
    product_id: int
    notes: Optional[str] = Field(None, max_length=200)
    priority: int = Field(3, ge=1, le=5)
    quantity: int = Field(1, ge=1)


class WishlistItemUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=200)
    priority: Optional[int] = Field(None, ge=1, le=5)
    quantity: Optional[int] = Field(None, ge=1)


class ShareUpdate(BaseModel):
    is_public: bool
    expires_at: Optional[datetime] = None
    max_uses: int = Field(0, ge=0)
