"""
Favorite Domain Model

A product a user bookmarked, with alert preferences.

Author: Tekashi
Date: 2025-10-23
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from tekashi.domain.product import Product


class Favorite(BaseModel):
    """
    Favorite domain model

    Fields:
        id: Internal favorite ID
        user_id / product_id: Unique pair
        is_active: False once removed (soft delete)
        notes: Free text
        priority: 1 (low) to 5 (high)
        notify_offer: Alert when the product goes on offer
        notify_stock: Alert when the product runs low
        view_count / last_viewed_at: Engagement counters
        product: Joined product, when loaded with the list queries
    """

    id: int
    user_id: int
    product_id: int
    is_active: bool = True
    notes: Optional[str] = Field(None, max_length=500)
    priority: int = Field(3, ge=1, le=5)
    notify_offer: bool = True
    notify_stock: bool = True
    view_count: int = Field(0, ge=0)
    last_viewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    product: Optional[Product] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        data = self.model_dump(exclude={'product'})
        data['product'] = self.product.to_dict() if self.product else None
        return data


class FavoriteCreate(BaseModel):
    product_id: int
    notes: Optional[str] = Field(None, max_length=500)
    priority: int = Field(3, ge=1, le=5)
    notify_offer: bool = True
    notify_stock: bool = True


class FavoriteUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=500)
    priority: Optional[int] = Field(None, ge=1, le=5)
    notify_offer: Optional[bool] = None
    notify_stock: Optional[bool] = None
