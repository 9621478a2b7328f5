from __future__ import annotations

import uuid
from datetime import datetime, timezone


# PUBLIC_INTERFACE
def utc_timestamp() -> str:
    """
    Return the current UTC time as an ISO8601 string with millisecond precision
    and a 'Z' suffix, e.g. '2024-01-01T09:30:00.123Z'.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
def new_activity_id() -> str:
    """Return a fresh unique identifier for an activity."""
    return str(uuid.uuid4())
