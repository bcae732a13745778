from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, LocationHistoryEntry


class AttendanceRepository(Protocol):
    def get_recent_locations(self, claimant_id: str, since: datetime, *, limit: int = 5) -> Sequence[LocationHistoryEntry]:
        """Most recent located records first."""

        raise NotImplementedError

    def get_attendance_timestamps(self, claimant_id: str, since: datetime) -> Sequence[datetime]:
        """Marked-at timestamps, newest first."""

        raise NotImplementedError

    def count_other_claimants_with_fingerprint(self, *, fingerprint: str, session_id: str, claimant_id: str) -> int:
        raise NotImplementedError

    def get_for_claimant_and_session(self, claimant_id: str, session_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(
        self,
        *,
        claimant_id: str,
        session_id: str,
        marked_at: datetime,
        class_name: Optional[str] = None,
        faculty_id: Optional[str] = None,
        qr_code_used: Optional[str] = None,
        location_lat: Optional[float] = None,
        location_lng: Optional[float] = None,
        device_fingerprint: Optional[str] = None,
        fraud_score: int = 0,
    ) -> int:
        """Insert one record; raises DuplicateAttendanceError if the claimant already has one for the session."""

        raise NotImplementedError
