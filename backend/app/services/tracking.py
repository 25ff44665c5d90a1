import logging
from typing import Optional
from urllib.parse import urlparse

from app.models.details import TrackingDetails
from app.models.enums import AuditAction, AuditTargetType, ResponseStatus, Role, TrackingKind
from app.models.user import User
from app.services.aggregator import CampaignCounters, counters
from app.services.audit import audit_ledger
from app.services.ledger import LedgerStore

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")

KIND_ACTIONS = {
    TrackingKind.OPEN: AuditAction.EMAIL_OPENED,
    TrackingKind.CLICK: AuditAction.EMAIL_CLICKED,
}


def is_safe_redirect(url: Optional[str]) -> bool:
    """Only absolute http(s) URLs may be redirected to."""
    if not url or not url.strip():
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.netloc)


class TrackingService:
    """Records email open/click pings into the ledger and campaign counters."""

    def __init__(self, ledger: LedgerStore = audit_ledger, campaign_counters: CampaignCounters = counters):
        self.ledger = ledger
        self.counters = campaign_counters

    async def resolve_actor(self, email: Optional[str]) -> Optional[str]:
        if not email:
            return None
        user = await User.find_one({"email": email})
        return str(user.id) if user else None

    async def record(
        self,
        kind: TrackingKind,
        details: TrackingDetails,
        response_status: ResponseStatus = ResponseStatus.SUCCESS,
    ):
        """
        Count the occurrence against its campaign (if any) and append one
        ledger entry. Lookup and counter failures propagate; the ledger append
        itself never does.
        """
        actor_id = await self.resolve_actor(details.email)
        if details.campaign:
            await self.counters.record_occurrence(details.campaign, actor_id, kind)

        return await self.append_entry(kind, details, actor_id, response_status)

    async def append_entry(
        self,
        kind: TrackingKind,
        details: TrackingDetails,
        actor_id: Optional[str] = None,
        response_status: ResponseStatus = ResponseStatus.SUCCESS,
    ):
        return await self.ledger.append(
            KIND_ACTIONS[kind],
            actor_id=actor_id,
            actor_role=Role.USER,
            target_id=details.msgid or details.campaign,
            target_type=AuditTargetType.EMAIL,
            response_status=response_status,
            details=details,
        )

    async def record_failure(self, kind: TrackingKind, details: TrackingDetails, error: Exception):
        logger.error(f"[TRACKING] Failed to record {kind.value} for {details.email or 'anonymous'}: {error}")
        failed = details.model_copy(update={"error": str(error)})
        return await self.append_entry(kind, failed, response_status=ResponseStatus.FAILURE)


tracking_service = TrackingService()
