from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.attendance_guard.attendance_guard.attendance.model import AttendanceRecord, LocationHistoryEntry
from src.attendance_guard.attendance_guard.sessions.model import SessionWindow

CLASSROOM = {"lat": 21.0285, "lng": 105.8542}


class InMemorySessions:
    def __init__(self, sessions=(), *, fail: Optional[Exception] = None):
        self.sessions = {s.session_id: s for s in sessions}
        self.fail = fail

    def get_by_id(self, session_id: str) -> Optional[SessionWindow]:
        if self.fail:
            raise self.fail
        return self.sessions.get(session_id)

    def get_by_code(self, qr_code: str) -> Optional[SessionWindow]:
        if self.fail:
            raise self.fail
        for s in self.sessions.values():
            if s.qr_code == qr_code and s.active:
                return s
        return None


class InMemoryAttendance:
    def __init__(self):
        self.records: list[AttendanceRecord] = []
        self._id = 0

    def add(self, claimant_id: str, marked_at: datetime, *, session_id: str = "old", lat=None, lng=None, fingerprint=None) -> int:
        return self.create_record(
            claimant_id=claimant_id,
            session_id=session_id,
            marked_at=marked_at,
            location_lat=lat,
            location_lng=lng,
            device_fingerprint=fingerprint,
        )

    def get_recent_locations(self, claimant_id: str, since: datetime, *, limit: int = 5):
        items = [
            r
            for r in self.records
            if r.claimant_id == claimant_id and r.marked_at >= since and r.location_lat is not None
        ]
        items.sort(key=lambda r: r.marked_at, reverse=True)
        return [
            LocationHistoryEntry(
                claimant_id=r.claimant_id,
                lat=r.location_lat,
                lng=r.location_lng,
                recorded_at=r.marked_at,
                session_id=r.session_id,
            )
            for r in items[:limit]
        ]

    def get_attendance_timestamps(self, claimant_id: str, since: datetime):
        items = [r.marked_at for r in self.records if r.claimant_id == claimant_id and r.marked_at >= since]
        return sorted(items, reverse=True)

    def count_other_claimants_with_fingerprint(self, *, fingerprint: str, session_id: str, claimant_id: str) -> int:
        return len(
            {
                r.claimant_id
                for r in self.records
                if r.device_fingerprint == fingerprint and r.session_id == session_id and r.claimant_id != claimant_id
            }
        )

    def get_for_claimant_and_session(self, claimant_id: str, session_id: str):
        for r in self.records:
            if r.claimant_id == claimant_id and r.session_id == session_id:
                return r
        return None

    def create_record(self, *, claimant_id, session_id, marked_at, class_name=None, faculty_id=None, qr_code_used=None,
                      location_lat=None, location_lng=None, device_fingerprint=None, fraud_score=0) -> int:
        self._id += 1
        self.records.append(
            AttendanceRecord(
                attendance_id=self._id,
                claimant_id=claimant_id,
                session_id=session_id,
                marked_at=marked_at,
                class_name=class_name,
                faculty_id=faculty_id,
                qr_code_used=qr_code_used,
                location_lat=location_lat,
                location_lng=location_lng,
                device_fingerprint=device_fingerprint,
                fraud_score=fraud_score,
            )
        )
        return self._id


class FakeAuditSink:
    def __init__(self, *, fail: bool = False):
        self.events: list[dict] = []
        self.fail = fail

    def log_security_event(self, *, event_type, claimant_id, payload, timestamp) -> int:
        if self.fail:
            raise RuntimeError("security_logs unavailable")
        self.events.append(
            {"event_type": event_type, "claimant_id": claimant_id, "payload": payload, "timestamp": timestamp}
        )
        return len(self.events)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def classroom_session(fixed_now) -> SessionWindow:
    return SessionWindow(
        session_id="cs101-s1",
        class_name="CS101",
        faculty_id="fac-1",
        start_time=fixed_now - timedelta(minutes=30),
        end_time=fixed_now + timedelta(minutes=60),
        active=True,
        registered_location=json.dumps(CLASSROOM),
        qr_code="CS101-ABC",
        timezone="UTC",
    )


@pytest.fixture
def sessions_repo(classroom_session) -> InMemorySessions:
    return InMemorySessions([classroom_session])


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def audit_sink() -> FakeAuditSink:
    return FakeAuditSink()


@pytest.fixture
def make_sessions():
    return InMemorySessions


@pytest.fixture
def make_audit_sink():
    return FakeAuditSink
