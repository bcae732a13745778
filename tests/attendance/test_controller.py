import json
import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from src.attendance_guard.attendance_guard.container import build_services
from src.attendance_guard.attendance_guard.core.constants import EARTH_RADIUS_METERS
from src.attendance_guard.attendance_guard.main import create_app

CLASSROOM = {"lat": 21.0285, "lng": 105.8542, "accuracy": 10}
QR = json.dumps({"sessionCode": "CS101-ABC", "sessionId": "cs101-s1"})


@pytest.fixture
def live_session(classroom_session):
    # routes score against the wall clock
    now = datetime.now(timezone.utc)
    return replace(classroom_session, start_time=now - timedelta(minutes=10), end_time=now + timedelta(minutes=80))


@pytest.fixture
def container(make_sessions, live_session, attendance_repo, audit_sink):
    c = build_services(
        sessions_repo=make_sessions([live_session]),
        attendance_repo=attendance_repo,
        audit_repo=audit_sink,
        lookup_timeout=2,
    )
    yield c
    c.shutdown()


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    with app.test_client() as c:
        yield c


def _login(client, user_id="student-1"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def test_routes_require_login(client):
    resp = client.post("/api/attendance/checkin", json={"qr_code": QR})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_checkin_success(client, attendance_repo):
    _login(client)

    resp = client.post(
        "/api/attendance/checkin",
        json={"qr_code": QR, "location": CLASSROOM, "device_info": {"userAgent": "Mozilla/5.0", "timezone": "UTC"}},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["session_id"] == "cs101-s1"
    assert body["verdict"]["fraud_score"] == 0
    assert attendance_repo.records[0].claimant_id == "student-1"


def test_checkin_duplicate_returns_409(client):
    _login(client)
    payload = {"qr_code": QR, "location": CLASSROOM}

    assert client.post("/api/attendance/checkin", json=payload).status_code == 200
    assert client.post("/api/attendance/checkin", json=payload).status_code == 409


def test_checkin_rejected_returns_403_with_verdict(client, attendance_repo):
    _login(client)
    far = {**CLASSROOM, "lat": CLASSROOM["lat"] + math.degrees(2000 / EARTH_RADIUS_METERS)}

    resp = client.post(
        "/api/attendance/checkin",
        json={
            "qr_code": QR,
            "location": far,
            "device_info": {"userAgent": "scraper-bot", "onlineStatus": False, "timezone": "UTC"},
        },
    )

    body = resp.get_json()
    assert resp.status_code == 403
    assert body["verdict"]["fraud_score"] == 80
    assert "OUTSIDE_GEOFENCE" in body["verdict"]["reason_codes"]
    assert attendance_repo.records == []


def test_checkin_with_bad_coordinates_returns_400(client):
    _login(client)

    resp = client.post("/api/attendance/checkin", json={"qr_code": QR, "location": {"lat": 200, "lng": 0}})

    assert resp.status_code == 400


def test_checkin_image_requires_file(client):
    _login(client)

    assert client.post("/api/attendance/checkin/image", data={}).status_code == 400


def test_location_check_uses_server_thresholds(client, attendance_repo):
    _login(client)

    resp = client.post(
        "/api/fraud/location-check",
        json={"session_id": "cs101-s1", "location": CLASSROOM, "device_info": {"scanDuration": 700}},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["fraud_score"] == 0
    assert body["location_verified"] is True
    assert attendance_repo.records == []


def test_location_check_requires_location(client):
    _login(client)

    assert client.post("/api/fraud/location-check", json={"session_id": "cs101-s1"}).status_code == 400


def test_pattern_analysis(client, attendance_repo):
    _login(client)
    start = datetime.now(timezone.utc) - timedelta(days=2)
    for i in range(10):
        attendance_repo.add("student-1", start - timedelta(minutes=2 * i))

    body = client.post("/api/fraud/pattern-analysis").get_json()

    assert body["total_records"] == 10
    assert body["risk_score"] == 55
    assert body["patterns"] == [
        "Multiple rapid attendance marks detected",
        "Suspicious attendance clustering detected",
    ]


def test_security_log(client, container, audit_sink):
    _login(client)

    resp = client.post(
        "/api/fraud/security-log",
        json={"event_type": "screenshot_attempt", "data": {"page": "scan"}, "timestamp": "2026-02-02T09:30:00Z"},
    )

    assert resp.get_json() == {"success": True, "event_logged": "screenshot_attempt", "queued": True}
    container.audit_logger.stop()
    event = audit_sink.events[-1]
    assert event["event_type"] == "screenshot_attempt"
    assert event["claimant_id"] == "student-1"
    assert event["payload"] == {"source": "client_reported", "data": {"page": "scan"}}


def test_security_log_requires_event_type(client):
    _login(client)

    assert client.post("/api/fraud/security-log", json={"data": {}}).status_code == 400


@pytest.mark.parametrize("body", [[1, 2], "qr", 42])
def test_checkin_non_object_body_returns_400(client, body):
    _login(client)

    resp = client.post("/api/attendance/checkin", json=body)

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_checkin_non_string_timestamp_returns_400(client, attendance_repo):
    _login(client)

    resp = client.post("/api/attendance/checkin", json={"qr_code": QR, "location": CLASSROOM, "timestamp": 12345})

    assert resp.status_code == 400
    assert attendance_repo.records == []


def test_checkin_reported_timestamp_does_not_change_scoring(client, attendance_repo, audit_sink, container):
    _login(client)
    reported = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()

    resp = client.post("/api/attendance/checkin", json={"qr_code": QR, "location": CLASSROOM, "timestamp": reported})

    assert resp.status_code == 200
    assert resp.get_json()["verdict"]["fraud_score"] == 0
    container.audit_logger.stop()
    assert audit_sink.events[-1]["payload"]["client_timestamp"] == reported
    assert audit_sink.events[-1]["payload"]["client_clock_drift_seconds"] < -86000


def test_checkin_session_store_down_returns_503(make_sessions, attendance_repo, audit_sink, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    c = build_services(
        sessions_repo=make_sessions([], fail=ConnectionError("db down")),
        attendance_repo=attendance_repo,
        audit_repo=audit_sink,
        lookup_timeout=2,
    )
    app = create_app(container=c)
    try:
        with app.test_client() as client:
            _login(client)
            resp = client.post("/api/attendance/checkin", json={"qr_code": QR, "location": CLASSROOM})
    finally:
        c.shutdown()

    assert resp.status_code == 503
    assert attendance_repo.records == []


@pytest.mark.parametrize("path", ["/api/fraud/location-check", "/api/fraud/security-log"])
def test_fraud_routes_reject_non_object_body(client, path):
    _login(client)

    assert client.post(path, json=[{"event_type": "x"}]).status_code == 400
