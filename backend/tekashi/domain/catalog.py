"""
Catalog vocabulary shared by products and product types

Enumerations for the fixed product attributes plus the slug rule used for
SEO-friendly URLs.

Author: Tekashi
Date: 2025-10-21
"""
import re
from enum import Enum


class Gender(str, Enum):
    """Target gender of a shoe model"""
    MEN = "men"
    WOMEN = "women"
    UNISEX = "unisex"
    BOYS = "boys"
    GIRLS = "girls"


class AgeGroup(str, Enum):
    """Target age group"""
    ADULT = "adult"
    KIDS = "kids"
    BABY = "baby"


class Season(str, Enum):
    """Season the model is sold for"""
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"
    ALL_YEAR = "all_year"


class Language(str, Enum):
    """Languages the catalog is translated into"""
    ES = "es"
    EN = "en"
    FR = "fr"
    PT = "pt"


_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def slugify(text: str) -> str:
    """
    Build a URL slug from a display name.

    "Air Max 90 - Edición!" -> "air-max-90-edicin"
    """
    slug = (text or "").lower()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")
