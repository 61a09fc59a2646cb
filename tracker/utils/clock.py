from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC.

    Values whose UTC equivalent falls outside the datetime range are pinned
    to the nearest representable bound.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError:
        bound = datetime.max if value.utcoffset() < timedelta(0) else datetime.min
        return bound.replace(tzinfo=timezone.utc)
