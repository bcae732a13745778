from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be finite")
    return number


def require_latitude(value: Any) -> float:
    lat = require_number(value, "lat")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError("lat must be between -90 and 90")
    return lat


def require_longitude(value: Any) -> float:
    lng = require_number(value, "lng")
    if not -180.0 <= lng <= 180.0:
        raise ValidationError("lng must be between -180 and 180")
    return lng


def optional_non_negative(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    number = require_number(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number
