"""
Product Type Domain Model

A product type is a catalog category (running, boots, sandals, ...).

Author: Tekashi
Date: 2025-10-21
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime

from tekashi.domain.catalog import Language
from tekashi.domain.product import Translation


class ProductType(BaseModel):
    """
    Product type domain model

    Fields:
        id: Internal type ID
        name: Unique display name
        description: Optional description
        is_active: Whether the type is listed
        sort_order: Position in menus (ascending)
        translations: Localized name/description
        slug: URL slug derived from name
        meta_description / keywords: SEO data
        product_count: Cached number of active products of this type
    """

    id: int = Field(..., description="Internal type ID")
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    sort_order: int = 0
    translations: Dict[str, Translation] = Field(default_factory=dict)
    slug: Optional[str] = None
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: List[str] = Field(default_factory=list)
    product_count: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump()


class ProductTypeCreate(BaseModel):
    """Schema for creating a product type"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    sort_order: int = 0
    translations: Dict[Language, Translation] = Field(default_factory=dict)
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: List[str] = Field(default_factory=list)


class ProductTypeUpdate(BaseModel):
    """Schema for updating a product type"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    sort_order: Optional[int] = None
    translations: Optional[Dict[Language, Translation]] = None
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: Optional[List[str]] = None
