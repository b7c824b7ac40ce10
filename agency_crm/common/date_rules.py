# agency_crm/common/date_rules.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple, Union


def utcnow() -> datetime:
    """Naive UTC timestamp; the store keeps every timestamp naive-UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utcnow().date()


def as_date(value: Optional[Union[str, date, datetime]]) -> Optional[date]:
    """Coerce ISO strings / datetimes to a date. Invalid input -> None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def renewal_window(start: date, days: int) -> Tuple[date, date]:
    """Inclusive [start, start + days] range used by the renewal notifier."""
    return start, start + timedelta(days=days)


def is_within_window(value: Optional[Union[str, date, datetime]], start: date, days: int) -> bool:
    d = as_date(value)
    if d is None:
        return False
    lo, hi = renewal_window(start, days)
    return lo <= d <= hi


def age_seconds(sent_at: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Seconds elapsed since ``sent_at``; missing timestamps count as infinitely old."""
    if sent_at is None:
        return float("inf")
    return ((now or utcnow()) - sent_at).total_seconds()
