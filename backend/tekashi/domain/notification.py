"""
Notification Domain Model

In-app messages addressed to a single user.

Author: Tekashi
Date: 2025-10-24
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum

from tekashi.domain.catalog import Language
from tekashi.domain.common import utcnow, ensure_aware


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    PROMOTION = "promotion"
    STOCK = "stock"
    OFFER = "offer"
    SYSTEM = "system"


class NotificationCategory(str, Enum):
    ORDER = "order"
    PRODUCT = "product"
    ACCOUNT = "account"
    PROMOTION = "promotion"
    SYSTEM = "system"
    OTHER = "other"


class NotificationText(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''} ago"


def elapsed_text(since: datetime, now: Optional[datetime] = None) -> str:
    """Human-readable age: '3 days ago', '1 hour ago', 'just now'"""
    now = now or utcnow()
    seconds = int((now - ensure_aware(since)).total_seconds())
    days, remainder = divmod(seconds, 86400)
    hours = remainder // 3600
    minutes = seconds // 60
    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    if minutes > 0:
        return _plural(minutes, "minute")
    return "just now"


class Notification(BaseModel):
    """
    Notification domain model

    Fields:
        id: Internal notification ID
        user_id: Recipient
        title / message: Base text
        type / category: Classification
        is_read / read_at: Read state
        action_url / action_text: Optional call to action
        priority: 1 (low) to 5 (urgent)
        expires_at: After this moment the notification is hidden
        group_id: Shared by notifications created in one bulk send
        translations: Localized title/message
        click_count / last_clicked_at: Interaction counters
    """

    id: int
    user_id: int
    title: str = Field(..., max_length=200)
    message: str = Field(..., max_length=1000)
    type: NotificationType = NotificationType.INFO
    category: NotificationCategory = NotificationCategory.OTHER
    is_read: bool = False
    read_at: Optional[datetime] = None
    action_url: Optional[str] = Field(None, max_length=500)
    action_text: Optional[str] = Field(None, max_length=50)
    priority: int = Field(1, ge=1, le=5)
    expires_at: Optional[datetime] = None
    group_id: Optional[str] = None
    translations: Dict[str, NotificationText] = Field(default_factory=dict)
    click_count: int = Field(0, ge=0)
    last_clicked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_expired(self) -> bool:
        return bool(self.expires_at and ensure_aware(self.expires_at) < utcnow())

    @property
    def elapsed(self) -> Optional[str]:
        return elapsed_text(self.created_at) if self.created_at else None

    def localized(self, language: Optional[str] = None) -> NotificationText:
        translation = self.translations.get(language) if language else None
        return NotificationText(
            title=(translation.title if translation and translation.title else self.title),
            message=(translation.message if translation and translation.message else self.message),
        )

    def to_dict(self, language: Optional[str] = None) -> dict:
        data = self.model_dump()
        data['is_expired'] = self.is_expired
        data['elapsed'] = self.elapsed
        if language:
            text = self.localized(language)
            data['title'] = text.title
            data['message'] = text.message
        return data


class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    type: NotificationType = NotificationType.INFO
    category: NotificationCategory = NotificationCategory.OTHER
    action_url: Optional[str] = Field(None, max_length=500)
    action_text: Optional[str] = Field(None, max_length=50)
    priority: int = Field(1, ge=1, le=5)
    expires_at: Optional[datetime] = None
    translations: Dict[Language, NotificationText] = Field(default_factory=dict)


class NotificationBulkCreate(NotificationCreate):
    user_ids: List[int] = Field(default_factory=list)
