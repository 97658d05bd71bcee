"""
Timestamp and identifier helpers.

Timestamps are ISO-8601 UTC strings with millisecond precision and a trailing
"Z", so that lexical order matches chronological order in ORDER BY clauses.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """Current (or given) time as an ISO-8601 UTC string, e.g. 2024-05-01T12:00:00.000Z."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record_id() -> str:
    """Opaque identifier for a new prompt or upload history entry."""
    return uuid.uuid4().hex
