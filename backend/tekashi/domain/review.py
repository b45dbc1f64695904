"""
Review Domain Model

Customer ratings of products, with moderation fields.

Author: Tekashi
Date: 2025-10-24
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime


class AdminReply(BaseModel):
    text: str = Field(..., max_length=500)
    replied_at: Optional[datetime] = None
    admin_id: Optional[int] = None


def helpfulness_percent(helpful: int, not_helpful: int) -> int:
    """Share of 'helpful' votes, 0 when nobody voted"""
    votes = helpful + not_helpful
    if votes == 0:
        return 0
    return round(helpful / votes * 100)


class Review(BaseModel):
    """
    Review domain model

    Fields:
        id: Internal review ID
        product_id / user_id: One active review per pair
        user_name: Author display name (from JOIN)
        rating: 1 to 5 stars
        title / comment: Review text
        pros / cons: Up to five bullet points each
        recommends: Whether the author recommends the product
        helpful_count / not_helpful_count: Votes from other users
        verified: Checked by an admin
        purchase_verified: Author has a delivered order with this product
        is_active: Soft-delete flag
        reported / report_reason: Moderation flag
        admin_reply: Store response
    """

    id: int
    product_id: int
    user_id: int
    user_name: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., max_length=200)
    comment: str = Field(..., max_length=1000)
    pros: List[str] = Field(default_factory=list, max_length=5)
    cons: List[str] = Field(default_factory=list, max_length=5)
    recommends: bool = True
    helpful_count: int = Field(0, ge=0)
    not_helpful_count: int = Field(0, ge=0)
    verified: bool = False
    purchase_verified: bool = False
    is_active: bool = True
    reported: bool = False
    report_reason: Optional[str] = None
    admin_reply: Optional[AdminReply] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def helpfulness(self) -> int:
        return helpfulness_percent(self.helpful_count, self.not_helpful_count)

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['helpfulness'] = self.helpfulness
        return data


class ReviewCreate(BaseModel):
    product_id: int
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=200)
    comment: str = Field(..., min_length=1, max_length=1000)
    pros: List[str] = Field(default_factory=list, max_length=5)
    cons: List[str] = Field(default_factory=list, max_length=5)
    recommends: bool = True


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    comment: Optional[str] = Field(None, min_length=1, max_length=1000)
    pros: Optional[List[str]] = Field(None, max_length=5)
    cons: Optional[List[str]] = Field(None, max_length=5)
    recommends: Optional[bool] = None


class ReviewStats(BaseModel):
    """Aggregates over the active reviews of one product"""
    total: int = 0
    average: float = 0.0
    distribution: Dict[int, int] = Field(default_factory=lambda: {star: 0 for star in range(1, 6)})
    helpful_total: int = 0
    not_helpful_total: int = 0
    verified_count: int = 0
    purchase_verified_count: int = 0
    recommend_count: int = 0

    @property
    def helpfulness(self) -> int:
        return helpfulness_percent(self.helpful_total, self.not_helpful_total)
