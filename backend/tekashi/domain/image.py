"""
Image Domain Model

Metadata for catalog images hosted locally or on a CDN. Uploading the bytes
happens elsewhere; this model only records where they live.

Author: Tekashi
Date: 2025-10-25
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Tuple
from datetime import datetime
from enum import Enum

CLOUDINARY_OPTIMIZED = "w_800,h_600,c_fill,q_auto,f_auto/"
CLOUDINARY_THUMBNAIL = "w_300,h_300,c_fill,q_auto,f_auto/"


class ImageKind(str, Enum):
    MAIN = "main"
    SECONDARY = "secondary"
    GALLERY = "gallery"
    THUMBNAIL = "thumbnail"


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    SVG = "svg"


class StorageProvider(str, Enum):
    LOCAL = "local"
    CLOUDINARY = "cloudinary"
    AWS_S3 = "aws_s3"
    FIREBASE_STORAGE = "firebase_storage"


class ImageMetadata(BaseModel):
    size: Optional[int] = Field(None, ge=0, description="Bytes")
    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)
    format: Optional[ImageFormat] = None
    quality: int = Field(85, ge=1, le=100)


def optimized_urls(url: str, provider: StorageProvider) -> Tuple[str, str]:
    """
    Derive (optimized_url, thumbnail_url) for a stored image.

    Cloudinary gets transformation segments after /upload/, S3 swaps the
    /original/ folder, anything else reuses the URL as is.
    """
    if provider == StorageProvider.CLOUDINARY and "/upload/" in url:
        return (
            url.replace("/upload/", f"/upload/{CLOUDINARY_OPTIMIZED}", 1),
            url.replace("/upload/", f"/upload/{CLOUDINARY_THUMBNAIL}", 1),
        )
    if provider == StorageProvider.AWS_S3 and "/original/" in url:
        return (
            url.replace("/original/", "/optimized/", 1),
            url.replace("/original/", "/thumbnails/", 1),
        )
    return url, url


class Image(BaseModel):
    """
    Image domain model

    Fields:
        id: Internal image ID
        url: Stored location (absolute, or relative to the public base URL)
        name / description / alt / title: Display data
        product_type_id: Owning type
        product_id: Owning product (optional)
        kind: main, secondary, gallery or thumbnail
        sort_order: Position in galleries
        metadata: Size, dimensions, format, quality
        optimized_url / thumbnail_url: Derived variants
        provider / external_id: Where the file is hosted
    """

    id: int
    url: str
    name: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    product_type_id: int
    product_id: Optional[int] = None
    kind: ImageKind = ImageKind.GALLERY
    sort_order: int = 0
    is_active: bool = True
    metadata: ImageMetadata = Field(default_factory=ImageMetadata)
    optimized_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    provider: StorageProvider = StorageProvider.LOCAL
    external_id: Optional[str] = None
    alt: Optional[str] = Field(None, max_length=200)
    title: Optional[str] = Field(None, max_length=200)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def full_url(self, base_url: str) -> str:
        if self.url.startswith("http"):
            return self.url
        return f"{base_url.rstrip('/')}/{self.url.lstrip('/')}"

    def urls(self, base_url: str) -> dict:
        return {
            "original": self.full_url(base_url),
            "optimized": self.optimized_url or self.full_url(base_url),
            "thumbnail": self.thumbnail_url or self.full_url(base_url),
        }

    def to_dict(self, base_url: Optional[str] = None) -> dict:
        data = self.model_dump()
        if base_url:
            data['full_url'] = self.full_url(base_url)
        return data


class ImageCreate(BaseModel):
    url: str = Field(..., min_length=1, max_length=1000)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    product_type_id: int
    product_id: Optional[int] = None
    kind: ImageKind = ImageKind.GALLERY
    sort_order: int = 0
    metadata: ImageMetadata = Field(default_factory=ImageMetadata)
    provider: StorageProvider = StorageProvider.LOCAL
    external_id: Optional[str] = None
    alt: Optional[str] = Field(None, max_length=200)
    title: Optional[str] = Field(None, max_length=200)


class ImageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    product_id: Optional[int] = None
    kind: Optional[ImageKind] = None
    sort_order: Optional[int] = None
    metadata: Optional[ImageMetadata] = None
    alt: Optional[str] = Field(None, max_length=200)
    title: Optional[str] = Field(None, max_length=200)
