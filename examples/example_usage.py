"""Example: score a check-in claim through the service layer (no Flask)."""

import importlib
from datetime import datetime, timezone

from config import get_settings_module

from src.attendance_guard.attendance_guard.container import build_container
from src.attendance_guard.attendance_guard.fraud.model import CheckInClaim, DeviceSignal
from src.attendance_guard.attendance_guard.geo.model import LocationFix


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    claim = CheckInClaim(
        claimant_id="student-1",
        session_id="cs101-2026-02-01",
        claimed_code="CLASS_CS101_2026_SESSION_1",
        client_timestamp=datetime.now(timezone.utc),
        claimed_location=LocationFix(lat=21.0285, lng=105.8542, accuracy=12),
        device_signal=DeviceSignal(user_agent="Mozilla/5.0", scan_duration_ms=2400, online_status=True, timezone="UTC"),
    )
    print(container.risk_aggregator.evaluate(claim).to_dict())
    container.shutdown()


if __name__ == "__main__":
    main()
