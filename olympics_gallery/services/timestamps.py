"""ISO 8601 timestamps as stored on catalog documents."""
from datetime import datetime, timezone
from typing import Optional


def to_iso(moment: datetime) -> str:
    """Format a datetime as UTC ISO 8601 with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """Current time (or ``now``) as an ISO string."""
    return to_iso(now or datetime.now(timezone.utc))
