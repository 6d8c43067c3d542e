# utils/time.py
from datetime import datetime, timezone
from typing import Callable

# Zero-arg callable returning an ISO-8601 timestamp string.
Clock = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_iso() -> str:
    """Same shape as JS Date.toISOString(): 2024-01-01T00:00:00.000Z"""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
