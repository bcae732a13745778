from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def now_utc() -> datetime:
    """Current UTC time (timezone-aware).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted)."""
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp: {value!r}")
    v = (value or "").strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(v))
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}")
