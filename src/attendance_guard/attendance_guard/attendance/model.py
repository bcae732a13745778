from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one accepted attendance mark."""

    attendance_id: int
    claimant_id: str
    session_id: str
    marked_at: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT
    class_name: Optional[str] = None
    faculty_id: Optional[str] = None
    qr_code_used: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    device_fingerprint: Optional[str] = None
    fraud_score: int = 0


@dataclass(frozen=True)
class LocationHistoryEntry:
    """Read-model over attendance records that carry a location."""

    claimant_id: str
    lat: float
    lng: float
    recorded_at: datetime
    session_id: str
