from datetime import datetime, timezone
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field

from app.models.enums import Role


class User(Document):
    name: Optional[str] = Field(default=None, example="Jane Trader")
    email: Indexed(str, unique=True) = Field(..., example="jane@example.com")
    role: Role = Role.USER
    tradingview_username: Optional[str] = None
    email_verified: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"
