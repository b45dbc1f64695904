"""
Customer engagement tables: favorites, wishlists, notifications, reviews
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey,
    CheckConstraint, UniqueConstraint, Index, text,
)
from sqlalchemy.dialects.postgresql import JSONB, ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tekashi.core.database import Base


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_favorites_user_product"),
        CheckConstraint("priority BETWEEN 1 AND 5", name="ck_favorites_priority"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, server_default="true")
    notes = Column(String(500))
    priority = Column(Integer, nullable=False, server_default="3")
    notify_offer = Column(Boolean, nullable=False, server_default="true")
    notify_stock = Column(Boolean, nullable=False, server_default="true")
    view_count = Column(Integer, nullable=False, server_default="0")
    last_viewed_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Wishlist(Base):
    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500))
    is_active = Column(Boolean, nullable=False, server_default="true")
    is_public = Column(Boolean, nullable=False, server_default="false")

    # Sharing
    share_code = Column(String(16), unique=True)
    share_expires_at = Column(DateTime(timezone=True))
    share_max_uses = Column(Integer, nullable=False, server_default="0")
    share_use_count = Column(Integer, nullable=False, server_default="0")

    notify = Column(JSONB, nullable=False, server_default="{}")
    views = Column(Integer, nullable=False, server_default="0")
    last_viewed_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("WishlistItem", back_populates="wishlist", cascade="all, delete-orphan")


class WishlistItem(Base):
    __tablename__ = "wishlist_items"
    __table_args__ = (
        UniqueConstraint("wishlist_id", "product_id", name="uq_wishlist_items_product"),
        CheckConstraint("priority BETWEEN 1 AND 5", name="ck_wishlist_items_priority"),
        CheckConstraint("quantity >= 1", name="ck_wishlist_items_quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    wishlist_id = Column(Integer, ForeignKey("wishlists.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    notes = Column(String(200))
    priority = Column(Integer, nullable=False, server_default="3")
    quantity = Column(Integer, nullable=False, server_default="1")
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    wishlist = relationship("Wishlist", back_populates="items")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint("priority BETWEEN 1 AND 5", name="ck_notifications_priority"),
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(String(1000), nullable=False)
    type = Column(String(20), nullable=False, server_default="info")
    category = Column(String(20), nullable=False, server_default="other")
    is_read = Column(Boolean, nullable=False, server_default="false")
    read_at = Column(DateTime(timezone=True))
    action_url = Column(String(500))
    action_text = Column(String(50))
    priority = Column(Integer, nullable=False, server_default="1")
    expires_at = Column(DateTime(timezone=True))
    group_id = Column(String(64), index=True)
    translations = Column(JSONB, nullable=False, server_default="{}")
    click_count = Column(Integer, nullable=False, server_default="0")
    last_clicked_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        # One active review per user and product
        Index(
            "uq_reviews_active_user_product", "product_id", "user_id",
            unique=True, postgresql_where=text("is_active"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    comment = Column(String(1000), nullable=False)
    pros = Column(ARRAY(Text), nullable=False, server_default="{}")
    cons = Column(ARRAY(Text), nullable=False, server_default="{}")
    recommends = Column(Boolean, nullable=False, server_default="true")

    helpful_count = Column(Integer, nullable=False, server_default="0")
    not_helpful_count = Column(Integer, nullable=False, server_default="0")
    verified = Column(Boolean, nullable=False, server_default="false")
    purchase_verified = Column(Boolean, nullable=False, server_default="false")

    is_active = Column(Boolean, nullable=False, server_default="true")
    reported = Column(Boolean, nullable=False, server_default="false")
    report_reason = Column(String(500))
    admin_reply = Column(JSONB)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
