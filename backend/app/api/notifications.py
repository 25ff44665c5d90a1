import logging
from datetime import datetime
from typing import List, Literal, Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.api.serializers import serialize
from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.errors import LedgerQueryError
from app.core.security import ADMIN_ROLES, get_current_user, require_roles
from app.models.details import GenericDetails
from app.models.enums import AuditAction, AuditTargetType, NotificationPriority, NotificationType, Role
from app.models.notification import Notification
from app.models.user import User
from app.services.audit import audit_ledger
from app.services.notifications import inbox_scope, notification_stats

logger = logging.getLogger(__name__)
router = APIRouter()


class NotificationRequest(BaseModel):
    type: NotificationType = NotificationType.GENERAL
    priority: NotificationPriority = NotificationPriority.MEDIUM
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    target_users: List[str] = Field(default_factory=list)
    target_id: Optional[str] = None
    expires_at: Optional[datetime] = None


@router.get("/notifications")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    unread: bool = False,
    user: User = Depends(get_current_user),
):
    query = inbox_scope(user)
    if unread:
        query = {**query, "is_read": False}
    skip = (page - 1) * limit
    try:
        items = await Notification.find(query).sort("-created_at", "-_id").skip(skip).limit(limit).to_list()
        total = await Notification.find(query).count()
    except Exception as e:
        logger.error(f"[NOTIFICATIONS] Failed to list notifications for {user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch notifications")

    return {
        "notifications": [serialize(n) for n in items],
        "totalCount": total,
        "hasMore": skip + len(items) < total,
        "currentPage": page,
    }


@router.post("/notifications", status_code=201)
async def create_notification(body: NotificationRequest, user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER))):
    notification = Notification(admin_id=str(user.id), **body.model_dump())
    await notification.insert()
    await audit_ledger.append(
        AuditAction.CREATE_NOTIFICATION,
        actor_id=user.id,
        actor_role=user.role,
        target_id=notification.id,
        target_type=AuditTargetType.NOTIFICATION,
        details=GenericDetails(data={"type": notification.type.value, "title": notification.title}),
    )
    return serialize(notification)


@router.get("/notifications/stats")
async def get_notification_stats(user: User = Depends(require_roles(*ADMIN_ROLES))):
    try:
        return await notification_stats(user)
    except LedgerQueryError:
        raise HTTPException(status_code=500, detail="Failed to fetch notification statistics")


@router.patch("/notifications/{notification_id}/read")
async def mark_notification_read(notification_id: PydanticObjectId, user: User = Depends(get_current_user)):
    notification = await Notification.find_one({"_id": notification_id, **inbox_scope(user)})
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not notification.is_read:
        notification.is_read = True
        await notification.save()
    return serialize(notification)


class BulkIdsRequest(BaseModel):
    ids: List[PydanticObjectId] = Field(..., min_length=1)


class BulkUpdateRequest(BulkIdsRequest):
    action: Literal["markAsRead"]
    is_read: bool = Field(..., alias="isRead")

    model_config = {"populate_by_name": True}


STAFF_EDITORS = (Role.ADMIN, Role.MANAGER)


def _can_view(user: User, notification: Notification) -> bool:
    uid = str(user.id)
    if user.role in STAFF_EDITORS or uid in (notification.user_id, notification.admin_id):
        return True
    if uid in notification.target_users:
        return True
    return notification.user_id is None and not notification.target_users


async def _audit_notifications(user: User, action: AuditAction, target_id: Optional[str], data: dict):
    await audit_ledger.append(
        action,
        actor_id=user.id,
        actor_role=user.role,
        target_id=target_id,
        target_type=AuditTargetType.NOTIFICATION,
        details=GenericDetails(data=data),
    )


@router.patch("/notifications/bulk")
async def bulk_update_notifications(body: BulkUpdateRequest, user: User = Depends(require_roles(*STAFF_EDITORS))):
    try:
        result = await Notification.find({"_id": {"$in": body.ids}}).update({"$set": {"is_read": body.is_read}})
    except Exception as e:
        logger.error(f"[NOTIFICATIONS] Bulk update by {user.id} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update notifications")

    count = result.matched_count if result else 0
    await _audit_notifications(
        user,
        AuditAction.UPDATE_NOTIFICATION,
        None,
        {"ids": [str(i) for i in body.ids], "isRead": body.is_read, "count": count},
    )
    return {"message": f"{count} notifications updated", "count": count}


@router.delete("/notifications/bulk")
async def bulk_delete_notifications(body: BulkIdsRequest, user: User = Depends(require_roles(*STAFF_EDITORS))):
    try:
        result = await Notification.find({"_id": {"$in": body.ids}}).delete()
    except Exception as e:
        logger.error(f"[NOTIFICATIONS] Bulk delete by {user.id} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete notifications")

    count = result.deleted_count if result else 0
    await _audit_notifications(
        user,
        AuditAction.DELETE_NOTIFICATION,
        None,
        {"ids": [str(i) for i in body.ids], "count": count},
    )
    return {"message": f"{count} notifications deleted", "count": count}


@router.get("/notifications/{notification_id}")
async def get_notification(notification_id: PydanticObjectId, user: User = Depends(get_current_user)):
    notification = await Notification.get(notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not _can_view(user, notification):
        raise HTTPException(status_code=403, detail="Forbidden")
    return serialize(notification)


@router.delete("/notifications/{notification_id}")
async def delete_notification(notification_id: PydanticObjectId, user: User = Depends(get_current_user)):
    """Recipients may delete their own notifications; admins and managers any."""
    notification = await Notification.get(notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    if user.role not in STAFF_EDITORS and notification.user_id != str(user.id):
        raise HTTPException(status_code=403, detail="Forbidden")

    await notification.delete()
    await _audit_notifications(
        user,
        AuditAction.DELETE_NOTIFICATION,
        str(notification_id),
        {"type": notification.type.value, "title": notification.title},
    )
    return {"message": "Notification deleted successfully"}
