"""
User Domain Model

Represents a store account (customer or administrator).

Author: Tekashi
Date: 2025-10-21
"""
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum

from tekashi.domain.catalog import Language


class UserRole(str, Enum):
    """Account roles"""
    CUSTOMER = "customer"
    ADMIN = "admin"


class Location(BaseModel):
    """Geographic location attached to a user profile"""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    full_address: Optional[str] = Field(None, max_length=300)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)


class User(BaseModel):
    """
    User domain model

    Fields:
        id: Internal user ID
        auth_uid: Subject of the identity token that owns this account
        name: Display name
        email: Unique, lower-cased email
        phone: Contact phone
        address: Postal address
        role: customer or admin
        is_active: Soft-delete flag
        loyalty_points: Points balance available for orders
        location: Optional geographic location
        language: Preferred language (es, en, fr, pt)
    """

    id: int = Field(..., description="Internal user ID")
    auth_uid: Optional[str] = Field(None, description="Identity token subject")
    name: str = Field(..., max_length=100)
    email: str = Field(..., description="Unique email (lower-case)")
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=200)
    role: UserRole = UserRole.CUSTOMER
    is_active: bool = True
    loyalty_points: int = Field(0, ge=0)
    location: Optional[Location] = None
    language: Language = Language.ES
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['is_admin'] = self.is_admin
        return data


class UserCreate(BaseModel):
    """Schema for an admin creating an account"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=200)
    role: UserRole = UserRole.CUSTOMER

    @field_validator('email')
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UserUpdate(BaseModel):
    """Profile fields a user (or an admin on their behalf) may change"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=200)
