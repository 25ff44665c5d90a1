import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.api.serializers import serialize
from app.core.errors import ResourceNotFoundError
from app.core.security import ADMIN_ROLES, require_roles
from app.models.details import GenericDetails
from app.models.email_campaign import EmailCampaign
from app.models.enums import AuditAction, AuditTargetType
from app.models.user import User
from app.services.aggregator import counters
from app.services.audit import audit_ledger
from app.services.tracking_links import add_tracking

logger = logging.getLogger(__name__)
router = APIRouter()


class CampaignRequest(BaseModel):
    name: str = Field(..., min_length=1)
    subject: Optional[str] = None


class TrackedHtmlRequest(BaseModel):
    html: str
    email: Optional[str] = None
    msgid: Optional[str] = None


@router.post("/email-campaigns", status_code=201)
async def create_campaign(body: CampaignRequest, user: User = Depends(require_roles(*ADMIN_ROLES))):
    campaign = EmailCampaign(name=body.name, subject=body.subject, created_by=str(user.id))
    await campaign.insert()
    logger.info(f"[CAMPAIGNS] Campaign {campaign.id} created by {user.id}")

    await audit_ledger.append(
        AuditAction.CAMPAIGN_CREATED,
        actor_id=user.id,
        actor_role=user.role,
        target_id=campaign.id,
        target_type=AuditTargetType.CAMPAIGN,
        details=GenericDetails(data={"name": campaign.name, "subject": campaign.subject}),
    )
    return serialize(campaign)


@router.get("/email-campaigns/{campaign_id}/stats")
async def campaign_stats(campaign_id: str, user: User = Depends(require_roles(*ADMIN_ROLES))):
    try:
        aggregate = await counters.get_aggregate(campaign_id)
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return aggregate.to_response()


@router.post("/email-campaigns/{campaign_id}/tracked-html")
async def tracked_html(campaign_id: str, body: TrackedHtmlRequest, user: User = Depends(require_roles(*ADMIN_ROLES))):
    """Wrap an email body's links with click tracking and append the open pixel."""
    try:
        await counters.get_aggregate(campaign_id)
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return {"html": add_tracking(body.html, email=body.email, msgid=body.msgid, campaign=campaign_id)}
