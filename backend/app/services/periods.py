from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import LEDGER_TIMEZONE

# Lookback windows accepted by the ?period= filter
PERIOD_DAYS = {
    "1d": 1,
    "3d": 3,
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "6m": 182,
    "1y": 365,
}

LOCAL_TZ = ZoneInfo(LEDGER_TIMEZONE)


def local_now() -> datetime:
    return datetime.now(LOCAL_TZ)


def _midnight(day: date, now: datetime) -> datetime:
    # A ZoneInfo resolves the UTC offset for `day` itself, not for `now`.
    return datetime.combine(day, time(), tzinfo=now.tzinfo)


def start_of_today(now: Optional[datetime] = None) -> datetime:
    now = now or local_now()
    return _midnight(now.date(), now)


def start_of_week(now: Optional[datetime] = None) -> datetime:
    """Most recent Sunday at midnight (Sunday is day 0)."""
    now = now or local_now()
    day_of_week = (now.weekday() + 1) % 7
    return _midnight(now.date() - timedelta(days=day_of_week), now)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    now = now or local_now()
    return _midnight(now.date().replace(day=1), now)


def period_start(period: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """Translate a ?period= shortcut into a lower timestamp bound; None means unbounded."""
    if not period or period == "all":
        return None
    if period not in PERIOD_DAYS:
        raise ValueError(f"Unknown period '{period}'")
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=PERIOD_DAYS[period])


def to_mongo_datetime(value: datetime) -> datetime:
    """MongoDB keeps naive UTC datetimes; normalise bounds before comparing."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
