from datetime import datetime, timezone
from typing import List, Optional

from beanie import Document
from pydantic import Field


class EmailCampaign(Document):
    name: str = Field(..., example="September renewals")
    subject: Optional[str] = Field(default=None, example="Your signals are about to expire")
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    # Distinct reach; list-shaped in storage but only ever updated with $addToSet
    opened_ids: List[str] = Field(default_factory=list)
    clicked_ids: List[str] = Field(default_factory=list)
    # Raw volume, repeats included
    opened_count: int = 0
    clicked_count: int = 0

    class Settings:
        name = "email_campaigns"
