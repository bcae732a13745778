from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class SessionWindow:
    """Class session as seen by the fraud engine (read-only).

    registered_location is kept as stored (JSON text) and parsed on use so a
    malformed value can be scored instead of failing the lookup.
    """

    session_id: str
    start_time: datetime
    end_time: datetime
    active: bool = True
    registered_location: Optional[Any] = None
    qr_code: Optional[str] = None
    timezone: Optional[str] = None
    class_name: Optional[str] = None
    faculty_id: Optional[str] = None
