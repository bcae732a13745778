import pytest

from src.attendance_guard.attendance_guard.attendance.payloads import parse_device_signal, parse_location
from src.attendance_guard.attendance_guard.attendance.qr import decode_payload
from src.attendance_guard.attendance_guard.common.datetime_utils import parse_iso_datetime
from src.attendance_guard.attendance_guard.core.exceptions import ValidationError


def test_decode_json_qr_payload():
    payload = decode_payload('{"sessionCode": "CS101-ABC", "sessionId": 42}')

    assert payload.session_code == "CS101-ABC"
    assert payload.session_id == "42"


@pytest.mark.parametrize("text", ["CS101-ABC", "  CS101-ABC  ", "[1, 2]"])
def test_non_object_qr_text_is_a_bare_code(text):
    payload = decode_payload(text)

    assert payload.session_code == text.strip()
    assert payload.session_id is None


def test_parse_location():
    fix = parse_location({"lat": "21.0285", "lng": 105.8542, "accuracy": 12})

    assert (fix.lat, fix.lng, fix.accuracy) == (21.0285, 105.8542, 12.0)
    assert parse_location(None) is None


@pytest.mark.parametrize(
    "data",
    [
        {"lat": 91, "lng": 0},
        {"lat": 0, "lng": -181},
        {"lat": "north", "lng": 0},
        {"lat": float("nan"), "lng": 0},
        {"lat": True, "lng": 0},
        {"lng": 0},
        {"lat": 0, "lng": 0, "accuracy": -1},
        "21.0,105.8",
    ],
)
def test_malformed_location_is_rejected(data):
    with pytest.raises(ValidationError):
        parse_location(data)


def test_parse_device_signal_maps_browser_keys():
    signal = parse_device_signal(
        {
            "userAgent": "Mozilla/5.0",
            "screenResolution": "1920x1080",
            "colorDepth": 24,
            "timezone": "Asia/Ho_Chi_Minh",
            "language": "vi-VN",
            "platform": "Linux x86_64",
            "canvasFingerprint": "data:image/png;base64,AAA",
            "cookiesEnabled": True,
            "onlineStatus": False,
            "scanDuration": 850,
            "location": {"accuracy": 30},
        }
    )

    assert signal.user_agent == "Mozilla/5.0"
    assert signal.color_depth == 24
    assert signal.canvas_fingerprint == "data:image/png;base64,AAA"
    assert signal.online_status is False
    assert signal.scan_duration_ms == 850
    assert signal.gps_accuracy_m == 30


def test_device_signal_fields_are_optional():
    signal = parse_device_signal({"onLine": "true"})

    assert signal.online_status is True
    assert signal.user_agent is None
    assert signal.scan_duration_ms is None
    assert parse_device_signal(None) is None


def test_negative_scan_duration_is_rejected():
    with pytest.raises(ValidationError):
        parse_device_signal({"scanDuration": -5})


def test_parse_iso_datetime_accepts_zulu():
    parsed = parse_iso_datetime("2026-02-02T09:30:00Z")

    assert parsed.isoformat() == "2026-02-02T09:30:00+00:00"
    assert parse_iso_datetime("") is None
    with pytest.raises(ValidationError):
        parse_iso_datetime("yesterday")


@pytest.mark.parametrize("value", [12345, 1.5, ["2026-02-02"], {"at": "now"}])
def test_parse_iso_datetime_rejects_non_strings(value):
    with pytest.raises(ValidationError, match="Invalid timestamp"):
        parse_iso_datetime(value)
