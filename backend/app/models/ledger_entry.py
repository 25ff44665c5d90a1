from datetime import datetime, timezone
from typing import Optional

from beanie import Document
from pydantic import Field

from app.models.details import EntryDetails, GenericDetails
from app.models.enums import ResponseStatus, Role


class LedgerEntry(Document):
    """
    Base shape of an append-only activity record.
    Concrete ledgers subclass this with their own collection name.
    """
    actor_id: Optional[str] = Field(default=None, example="66b1f0c2e4b0a1a2b3c4d5e6")
    actor_role: Role = Role.USER
    action: str = Field(..., min_length=1, example="LOGIN")
    target_id: Optional[str] = None
    target_type: Optional[str] = None
    response_status: Optional[ResponseStatus] = None
    details: EntryDetails = Field(default_factory=GenericDetails)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditLog(LedgerEntry):
    class Settings:
        name = "audit_logs"
        indexes = ["action", "actor_id", "timestamp"]


class ActivityEvent(LedgerEntry):
    """User-scoped domain event such as USER_SIGN_IN or BACKTEST_CREATED."""

    class Settings:
        name = "events"
        indexes = ["action", "actor_id", "timestamp"]
