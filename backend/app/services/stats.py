import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, Optional, Type

from beanie import Document

from app.core.errors import LedgerQueryError
from app.services.periods import (
    local_now,
    start_of_month,
    start_of_today,
    start_of_week,
    to_mongo_datetime,
)

logger = logging.getLogger(__name__)


@dataclass
class PeriodCounts:
    total: int
    this_month: int
    this_week: int
    today: int

    def to_response(self, noun: str) -> dict:
        """Render as {totalX, xThisMonth, xThisWeek, xToday}."""
        title = noun[:1].upper() + noun[1:]
        return {
            f"total{title}": self.total,
            f"{noun}ThisMonth": self.this_month,
            f"{noun}ThisWeek": self.this_week,
            f"{noun}Today": self.today,
        }


async def count_since(
    model: Type[Document],
    scope: Optional[dict] = None,
    since: Optional[datetime] = None,
    time_field: str = "timestamp",
) -> int:
    query = dict(scope or {})
    if since is not None:
        query[time_field] = {"$gte": to_mongo_datetime(since)}
    return await model.find(query).count()


async def period_counts(
    model: Type[Document],
    scope: Optional[dict] = None,
    now: Optional[datetime] = None,
    time_field: str = "timestamp",
) -> PeriodCounts:
    now = now or local_now()
    try:
        total, this_month, this_week, today = await asyncio.gather(
            count_since(model, scope, None, time_field),
            count_since(model, scope, start_of_month(now), time_field),
            count_since(model, scope, start_of_week(now), time_field),
            count_since(model, scope, start_of_today(now), time_field),
        )
    except Exception as e:
        logger.error(f"[STATS] Failed to compute period counts for {model.__name__}: {e}", exc_info=True)
        raise LedgerQueryError(f"Failed to fetch {model.__name__} stats", e) from e
    return PeriodCounts(total=total, this_month=this_month, this_week=this_week, today=today)


async def group_by_category(
    model: Type[Document],
    field: str,
    categories: Iterable,
    scope: Optional[dict] = None,
) -> Dict[str, int]:
    """Count documents per category. Every known category is present, zero if unused."""
    counts = {c.value if isinstance(c, Enum) else c: 0 for c in categories}
    pipeline = [
        {"$match": dict(scope or {})},
        {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
    ]
    try:
        rows = await model.aggregate(pipeline).to_list()
    except Exception as e:
        logger.error(f"[STATS] Failed to group {model.__name__} by {field}: {e}", exc_info=True)
        raise LedgerQueryError(f"Failed to group {model.__name__} by {field}", e) from e

    for row in rows:
        if row["_id"] is not None:
            counts[row["_id"]] = row["count"]
    return counts


async def recent_count(
    model: Type[Document],
    scope: Optional[dict] = None,
    window: timedelta = timedelta(days=1),
    time_field: str = "created_at",
    now: Optional[datetime] = None,
) -> int:
    now = now or local_now()
    return await count_since(model, scope, now - window, time_field)
