"""
Fire-and-forget helpers for recording audit entries and user events.

Every helper goes through LedgerStore.append, so none of them can raise into
the business logic that calls them.
"""
import logging
from typing import Optional

from app.models.details import AuthDetails, ChangeDetails
from app.models.enums import AuditAction, AuditTargetType, ResponseStatus, Role
from app.models.ledger_entry import ActivityEvent, AuditLog
from app.models.user import User
from app.services.ledger import LedgerStore

logger = logging.getLogger(__name__)

audit_ledger = LedgerStore(AuditLog, "audit")
event_ledger = LedgerStore(ActivityEvent, "event")


async def audit_user_action(actor: User, action: AuditAction, target_user_id: str, details: Optional[ChangeDetails] = None):
    return await audit_ledger.append(
        action,
        actor_id=actor.id,
        actor_role=actor.role,
        target_id=target_user_id,
        target_type=AuditTargetType.USER,
        response_status=ResponseStatus.SUCCESS,
        details=details,
    )


async def audit_auth_action(
    user_id: Optional[str],
    action: AuditAction,
    details: Optional[AuthDetails] = None,
    role: Role = Role.USER,
    response_status: ResponseStatus = ResponseStatus.SUCCESS,
):
    return await audit_ledger.append(
        action,
        actor_id=user_id,
        actor_role=role,
        target_id=user_id,
        target_type=AuditTargetType.USER,
        response_status=response_status,
        details=details or AuthDetails(),
    )


async def audit_system_action(actor: User, action: AuditAction, details=None):
    return await audit_ledger.append(
        action,
        actor_id=actor.id,
        actor_role=actor.role,
        target_type=AuditTargetType.SYSTEM,
        details=details,
    )


async def record_event(user_id: str, event_type: str, details=None, role: Role = Role.USER):
    return await event_ledger.append(event_type, actor_id=user_id, actor_role=role, details=details)


async def on_sign_in(user: User, provider: Optional[str] = None, is_new_user: bool = False, user_agent: Optional[str] = None):
    """Hook for the auth service's sign-in callback."""
    details = AuthDetails(provider=provider, is_new_user=is_new_user, email=user.email, user_agent=user_agent)
    await record_event(str(user.id), "USER_SIGN_IN", details, role=user.role)
    await audit_auth_action(str(user.id), AuditAction.LOGIN, details, role=user.role)
    logger.info(f"[AUDIT] Sign-in recorded for user {user.id}")


async def on_user_created(user: User):
    await record_event(
        str(user.id),
        "USER_CREATED",
        AuthDetails(email=user.email, is_new_user=True),
        role=user.role,
    )
