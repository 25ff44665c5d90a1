from datetime import datetime, timezone
from typing import List, Optional

from beanie import Document
from pydantic import Field

from app.models.enums import NotificationPriority, NotificationType


class Notification(Document):
    user_id: Optional[str] = None  # None means system-wide
    admin_id: Optional[str] = None
    target_users: List[str] = Field(default_factory=list)
    target_id: Optional[str] = None
    type: NotificationType = NotificationType.GENERAL
    priority: NotificationPriority = NotificationPriority.MEDIUM
    title: str = Field(..., example="Payment Received")
    message: str = Field(..., example="Your payment of 49 USDT has been received.")
    is_read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: Optional[datetime] = None

    class Settings:
        name = "notifications"
        indexes = ["user_id", "type", "created_at"]
