"""Parse untrusted request JSON into claim value objects.

Malformed coordinates and missing fields raise ValidationError here, before any
fraud scoring runs.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.validators import optional_non_negative, require_latitude, require_longitude, require_number
from ..core.exceptions import ValidationError
from ..fraud.model import DeviceSignal
from ..geo.model import LocationFix


def parse_location(data: Optional[Mapping[str, Any]]) -> Optional[LocationFix]:
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValidationError("location must be an object")
    return LocationFix(
        lat=require_latitude(data.get("lat")),
        lng=require_longitude(data.get("lng")),
        accuracy=optional_non_negative(data.get("accuracy"), "accuracy"),
    )


def _opt_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def parse_device_signal(data: Optional[Mapping[str, Any]]) -> Optional[DeviceSignal]:
    """Accepts the browser's camelCase keys (userAgent, scanDuration, ...)."""
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValidationError("device_info must be an object")

    location = data.get("location") if isinstance(data.get("location"), Mapping) else {}
    online = data.get("onlineStatus", data.get("onLine"))
    color_depth = data.get("colorDepth")
    scan_duration = data.get("scanDuration")

    return DeviceSignal(
        user_agent=_opt_str(data.get("userAgent")),
        screen_resolution=_opt_str(data.get("screenResolution")),
        color_depth=int(require_number(color_depth, "colorDepth")) if color_depth is not None else None,
        timezone=_opt_str(data.get("timezone")),
        language=_opt_str(data.get("language")),
        platform=_opt_str(data.get("platform")),
        canvas_fingerprint=_opt_str(data.get("canvasFingerprint")),
        cookies_enabled=_opt_bool(data.get("cookiesEnabled")),
        online_status=_opt_bool(online),
        scan_duration_ms=optional_non_negative(scan_duration, "scanDuration"),
        gps_accuracy_m=optional_non_negative(location.get("accuracy"), "location.accuracy"),
    )
