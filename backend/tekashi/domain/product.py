"""
Product Domain Model

Represents a shoe model in the Tekashi catalog, including its offer window
and translated texts.

Author: Tekashi
Date: 2025-10-21
"""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal

from tekashi.domain.catalog import Gender, AgeGroup, Season, Language
from tekashi.domain.common import utcnow, ensure_aware, to_money, decimals_to_float


class Translation(BaseModel):
    """Translated name/description for one language"""
    name: Optional[str] = None
    description: Optional[str] = None


class ProductOffer(BaseModel):
    """
    Promotional window for a product

    Fields:
        active: Whether the offer is switched on
        discount: Percentage discount (0-100)
        offer_price: Fixed price during the offer (overrides discount)
        starts_at / ends_at: Optional window bounds; missing bound = open
    """
    active: bool = False
    discount: Decimal = Field(Decimal("0"), ge=0, le=100)
    offer_price: Optional[Decimal] = Field(None, ge=0)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.starts_at and self.ends_at and ensure_aware(self.ends_at) < ensure_aware(self.starts_at):
            raise ValueError("Offer end date must be after its start date")
        return self

    def is_running(self, now: Optional[datetime] = None) -> bool:
        """True when the offer is active and now lies inside its window"""
        if not self.active:
            return False
        now = now or utcnow()
        if self.starts_at and ensure_aware(self.starts_at) > now:
            return False
        if self.ends_at and ensure_aware(self.ends_at) < now:
            return False
        return True


class Product(BaseModel):
    """
    Product domain model - represents a shoe in our catalog

    Fields:
        id: Internal product ID (primary key)
        name: Product name
        description: Long description
        price: List price
        stock: Units available
        product_type_id: Owning product type (category)
        brand / model / material: Descriptive attributes
        sizes / colors: Available variants
        gender / age_group / season: Target audience
        is_active: Soft-delete flag (inactive products are hidden)
        is_featured: Shown on the home page
        offer: Promotional window
        slug / meta_description / keywords: SEO data
        views / sales_count: Counters
        rating_average / rating_count: Aggregated from active reviews
        translations: Localized name/description keyed by language
    """

    # Primary identification
    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=1000)

    # Pricing and inventory
    price: Decimal = Field(..., ge=0, description="List price")
    stock: int = Field(0, ge=0, description="Units available")

    # Classification
    product_type_id: int = Field(..., description="Product type ID")
    product_type_name: Optional[str] = Field(None, description="Product type name (from JOIN)")
    brand: Optional[str] = None
    model: Optional[str] = None
    material: Optional[str] = None
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    gender: Optional[Gender] = None
    age_group: Optional[AgeGroup] = None
    season: Optional[Season] = None

    # Flags
    is_active: bool = True
    is_featured: bool = False
    offer: ProductOffer = Field(default_factory=ProductOffer)

    # SEO
    slug: Optional[str] = None
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: List[str] = Field(default_factory=list)

    # Counters
    views: int = Field(0, ge=0)
    sales_count: int = Field(0, ge=0)
    rating_average: Decimal = Field(Decimal("0"), ge=0, le=5)
    rating_count: int = Field(0, ge=0)

    translations: Dict[str, Translation] = Field(default_factory=dict)

    # Metadata
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        protected_namespaces=(),
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    # Computed properties
    @property
    def on_offer(self) -> bool:
        """Offer switched on and currently inside its date window"""
        return self.offer.is_running()

    @property
    def final_price(self) -> Decimal:
        """Price a customer pays right now"""
        if self.on_offer:
            if self.offer.offer_price is not None:
                return to_money(self.offer.offer_price)
            if self.offer.discount > 0:
                return to_money(self.price * (1 - self.offer.discount / 100))
        return to_money(self.price)

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock <= 0

    def localized(self, language: Optional[str] = None) -> Translation:
        """Name/description in the requested language, falling back to the base text"""
        translation = self.translations.get(language) if language else None
        return Translation(
            name=(translation.name if translation and translation.name else self.name),
            description=(
                translation.description if translation and translation.description
                else self.description
            ),
        )

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump()

        data['final_price'] = float(self.final_price)
        data['on_offer'] = self.on_offer
        data['is_out_of_stock'] = self.is_out_of_stock

        decimals_to_float(data, ['price', 'rating_average'])
        decimals_to_float(data['offer'], ['discount', 'offer_price'])

        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    product_type_id: int
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    gender: Optional[Gender] = None
    age_group: Optional[AgeGroup] = None
    season: Optional[Season] = None
    is_featured: bool = False
    offer: Optional[ProductOffer] = None
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: List[str] = Field(default_factory=list)
    translations: Dict[Language, Translation] = Field(default_factory=dict)

    model_config = ConfigDict(protected_namespaces=())


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    product_type_id: Optional[int] = None
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    gender: Optional[Gender] = None
    age_group: Optional[AgeGroup] = None
    season: Optional[Season] = None
    is_featured: Optional[bool] = None
    meta_description: Optional[str] = Field(None, max_length=160)
    keywords: Optional[List[str]] = None
    translations: Optional[Dict[Language, Translation]] = None

    model_config = ConfigDict(protected_namespaces=())
