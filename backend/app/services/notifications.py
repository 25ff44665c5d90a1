import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.errors import LedgerQueryError
from app.models.enums import NotificationType, Role
from app.models.notification import Notification
from app.models.user import User
from app.services.periods import to_mongo_datetime
from app.services.stats import group_by_category, recent_count

logger = logging.getLogger(__name__)

# Support staff only see the non-sensitive categories
SUPPORT_VISIBLE_TYPES = [NotificationType.GENERAL.value, NotificationType.RENEWAL_REMINDER.value]


def inbox_scope(user: User) -> dict:
    """Notifications addressed to the user, or broadcast to everyone."""
    uid = str(user.id)
    return {"$or": [{"user_id": uid}, {"target_users": uid}, {"user_id": None, "target_users": {"$size": 0}}]}


def staff_scope(user: User) -> dict:
    uid = str(user.id)
    if user.role == Role.SUPPORT:
        return {"$or": [{"admin_id": uid}, {"type": {"$in": SUPPORT_VISIBLE_TYPES}}]}
    return {"$or": [{"admin_id": uid}, {"user_id": None}]}


async def notification_stats(user: User, now: Optional[datetime] = None) -> dict:
    scope = staff_scope(user)
    try:
        total = await Notification.find(scope).count()
        unread = await Notification.find({**scope, "is_read": False}).count()
        recent = await recent_count(Notification, scope, now=now)
    except Exception as e:
        logger.error(f"[NOTIFICATIONS] Failed to compute stats for {user.id}: {e}", exc_info=True)
        raise LedgerQueryError("Failed to fetch notification statistics", e) from e
    by_type = await group_by_category(Notification, "type", NotificationType, scope)
    return {"total": total, "unread": unread, "byType": by_type, "recent": recent}


async def purge_expired(now: Optional[datetime] = None) -> int:
    cutoff = to_mongo_datetime(now or datetime.now(timezone.utc))
    result = await Notification.find({"expires_at": {"$lt": cutoff}}).delete()
    deleted = result.deleted_count if result else 0
    logger.info(f"[NOTIFICATIONS] Purged {deleted} expired notifications")
    return deleted
