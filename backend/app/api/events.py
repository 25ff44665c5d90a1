import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.serializers import serialize
from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.errors import LedgerQueryError
from app.core.security import get_current_user
from app.models.ledger_entry import ActivityEvent
from app.models.user import User
from app.services.audit import event_ledger
from app.services.ledger import LedgerFilter
from app.services.stats import period_counts

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/events")
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = None,
    eventType: Optional[str] = None,
    user: User = Depends(get_current_user),
):
    """The signed-in user's own activity, newest first."""
    ledger_filter = LedgerFilter(search=search, action=eventType, actor_id=str(user.id))
    try:
        result = await event_ledger.query(ledger_filter, page=page, limit=limit)
    except LedgerQueryError:
        raise HTTPException(status_code=500, detail="Failed to fetch events")

    return {
        "success": True,
        "events": [serialize(event) for event in result.items],
        "hasMore": result.has_more,
        "totalCount": result.total_count,
        "currentPage": page,
        "totalPages": result.total_pages,
    }


@router.get("/events/stats")
async def event_stats(user: User = Depends(get_current_user)):
    try:
        stats = await period_counts(ActivityEvent, {"actor_id": str(user.id)})
    except LedgerQueryError:
        raise HTTPException(status_code=500, detail="Failed to fetch event stats")
    return {"success": True, "stats": stats.to_response("events")}


@router.get("/events/types")
async def event_types(user: User = Depends(get_current_user)):
    uid = str(user.id)
    try:
        types = await event_ledger.available_actions(actor_id=uid)
        samples = await event_ledger.recent(actor_id=uid, limit=10)
        total = await event_ledger.count(actor_id=uid)
    except LedgerQueryError:
        raise HTTPException(status_code=500, detail="Failed to fetch event types")

    return {
        "success": True,
        "uniqueEventTypes": types,
        "sampleEvents": [{"eventType": e.action, "details": e.details.model_dump(mode="json")} for e in samples],
        "totalEvents": total,
    }
