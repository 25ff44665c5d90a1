from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field


class TrackingDetails(BaseModel):
    """Context captured by the open pixel and click redirect."""

    kind: Literal["tracking"] = "tracking"
    email: Optional[str] = None
    msgid: Optional[str] = None
    campaign: Optional[str] = None
    target: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    error: Optional[str] = None


class ChangeDetails(BaseModel):
    kind: Literal["change"] = "change"
    previous_values: Dict[str, Any] = Field(default_factory=dict)
    new_values: Dict[str, Any] = Field(default_factory=dict)
    reason: Optional[str] = None


class AuthDetails(BaseModel):
    kind: Literal["auth"] = "auth"
    provider: Optional[str] = None
    is_new_user: Optional[bool] = None
    email: Optional[str] = None
    reason: Optional[str] = None
    user_agent: Optional[str] = None


class GenericDetails(BaseModel):
    # Escape hatch for event kinds that have no dedicated shape yet.
    kind: Literal["generic"] = "generic"
    data: Dict[str, Any] = Field(default_factory=dict)


EntryDetails = Annotated[
    Union[TrackingDetails, ChangeDetails, AuthDetails, GenericDetails],
    Field(discriminator="kind"),
]
