"""
Catalog tables: product types, products and image metadata
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, DECIMAL, ForeignKey,
    CheckConstraint, Index,
)
from sqlalchemy.dialects.postgresql import JSONB, ARRAY
from sqlalchemy.sql import func
from tekashi.core.database import Base


class ProductType(Base):
    """
    Catalog categories (running, boots, sandals, ...)
    """
    __tablename__ = "product_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500))
    is_active = Column(Boolean, nullable=False, server_default="true")
    sort_order = Column(Integer, nullable=False, server_default="0")
    translations = Column(JSONB, nullable=False, server_default="{}")

    # SEO
    slug = Column(String(120), unique=True, index=True)
    meta_description = Column(String(160))
    keywords = Column(ARRAY(Text), nullable=False, server_default="{}")

    # Cached count of active products
    product_count = Column(Integer, nullable=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Product(Base):
    """
    Shoe models offered in the store
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price"),
        CheckConstraint("stock >= 0", name="ck_products_stock"),
        CheckConstraint("offer_discount BETWEEN 0 AND 100", name="ck_products_offer_discount"),
        Index("ix_products_type_active", "product_type_id", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(1000))

    # Pricing and inventory
    price = Column(DECIMAL(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, server_default="0")

    # Classification
    product_type_id = Column(Integer, ForeignKey("product_types.id"), nullable=False)
    brand = Column(String(100), index=True)
    model = Column(String(100))
    material = Column(String(100))
    sizes = Column(ARRAY(Text), nullable=False, server_default="{}")
    colors = Column(ARRAY(Text), nullable=False, server_default="{}")
    gender = Column(String(20))
    age_group = Column(String(20))
    season = Column(String(20))

    # Flags
    is_active = Column(Boolean, nullable=False, server_default="true")
    is_featured = Column(Boolean, nullable=False, server_default="false")

    # Offer window
    offer_active = Column(Boolean, nullable=False, server_default="false")
    offer_discount = Column(DECIMAL(5, 2), nullable=False, server_default="0")
    offer_price = Column(DECIMAL(12, 2))
    offer_starts_at = Column(DateTime(timezone=True))
    offer_ends_at = Column(DateTime(timezone=True))

    # SEO
    slug = Column(String(220), index=True)
    meta_description = Column(String(160))
    keywords = Column(ARRAY(Text), nullable=False, server_default="{}")

    # Counters
    views = Column(Integer, nullable=False, server_default="0")
    sales_count = Column(Integer, nullable=False, server_default="0")
    rating_average = Column(DECIMAL(2, 1), nullable=False, server_default="0")
    rating_count = Column(Integer, nullable=False, server_default="0")

    translations = Column(JSONB, nullable=False, server_default="{}")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Image(Base):
    """
    Image metadata (files live on local disk or a CDN)
    """
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(1000), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(String(500))
    product_type_id = Column(Integer, ForeignKey("product_types.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True)
    kind = Column(String(20), nullable=False, server_default="gallery")
    sort_order = Column(Integer, nullable=False, server_default="0")
    is_active = Column(Boolean, nullable=False, server_default="true")
    image_metadata = Column(JSONB, nullable=False, server_default="{}")
    optimized_url = Column(String(1000))
    thumbnail_url = Column(String(1000))
    provider = Column(String(30), nullable=False, server_default="local")
    external_id = Column(String(255))
    alt = Column(String(200))
    title = Column(String(200))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
