"""
Small helpers shared by the domain models
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENTS = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with database timestamps"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_money(value) -> Decimal:
    """Round to cents, half up"""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def decimals_to_float(data: dict, fields) -> dict:
    """Convert Decimal fields to float for JSON compatibility"""
    for field in fields:
        if data.get(field) is not None:
            data[field] = float(data[field])
    return data
