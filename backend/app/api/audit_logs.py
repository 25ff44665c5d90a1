import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from app.api.serializers import serialize
from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.errors import LedgerQueryError
from app.core.security import ADMIN_ROLES, get_current_user, require_roles
from app.models.enums import ResponseStatus
from app.models.ledger_entry import AuditLog
from app.models.user import User
from app.services.audit import audit_ledger
from app.services.ledger import LedgerFilter
from app.services.stats import period_counts

logger = logging.getLogger(__name__)
router = APIRouter()


class AuditLogRequest(BaseModel):
    action: str = Field(..., min_length=1, example="UPDATE_PAIR")
    target_id: Optional[str] = Field(default=None, alias="targetId")
    target_type: Optional[str] = Field(default=None, alias="targetType")
    response_status: Optional[ResponseStatus] = Field(default=None, alias="responseStatus")
    details: Optional[Dict[str, Any]] = None

    model_config = {"populate_by_name": True}

    @field_validator("action")
    @classmethod
    def action_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("action must not be blank")
        return value


@router.get("/audit-logs")
async def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    q: Optional[str] = Query(None, description="Search actor name, email or action"),
    role: Optional[str] = Query(None, description="USER, NOTUSER, ALL or a specific role"),
    action: Optional[str] = None,
    responseStatus: Optional[str] = None,
    period: Optional[str] = Query(None, description="1d, 3d, 7d, 30d, 90d, 6m, 1y or all"),
    user: User = Depends(require_roles(*ADMIN_ROLES)),
):
    ledger_filter = LedgerFilter(search=q, role=role, action=action, response_status=responseStatus, period=period)
    try:
        result = await audit_ledger.query(ledger_filter, page=page, limit=limit)
        state = await period_counts(AuditLog)
        available = await audit_ledger.available_actions()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LedgerQueryError as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to fetch audit logs", "error": e.message},
        )

    return {
        "success": True,
        "auditLogs": [serialize(entry) for entry in result.items],
        "state": {
            "total": state.total,
            "thisMonth": state.this_month,
            "thisWeek": state.this_week,
            "today": state.today,
        },
        "totalCount": result.total_count,
        "hasMore": result.has_more,
        "currentPage": page,
        "totalPages": result.total_pages,
        "availableEventTypes": available,
        "message": "Audit logs fetched successfully",
    }


@router.post("/audit-logs", status_code=201)
async def create_audit_log(body: AuditLogRequest, user: User = Depends(get_current_user)):
    """Client-side audit hook. Recording is best-effort; a failed write answers 202."""
    entry = await audit_ledger.append(
        body.action.upper(),
        actor_id=user.id,
        actor_role=user.role,
        target_id=body.target_id,
        target_type=body.target_type,
        response_status=body.response_status,
        details=body.details,
    )
    if entry is None:
        return JSONResponse(status_code=202, content={"success": False, "message": "Audit log could not be recorded"})
    return {"success": True, "auditLog": serialize(entry), "message": "Audit log created"}


@router.get("/audit-logs/stats")
async def audit_log_stats(user: User = Depends(require_roles(*ADMIN_ROLES))):
    try:
        stats = await period_counts(AuditLog)
    except LedgerQueryError as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to fetch audit stats", "error": e.message},
        )
    return {"success": True, "stats": stats.to_response("audits"), "message": "Audit stats fetched successfully"}
