from __future__ import annotations

from enum import Enum


class CallSite(str, Enum):
    """Where a device check runs; each site has its own thresholds."""

    CLIENT = "client"
    SERVER = "server"


class ReasonCode(str, Enum):
    """Machine-readable companion to the free-text verdict reasons."""

    SESSION_INVALID = "SESSION_INVALID"
    TOO_EARLY = "TOO_EARLY"
    TOO_LATE = "TOO_LATE"
    OUTSIDE_GEOFENCE = "OUTSIDE_GEOFENCE"
    SESSION_LOCATION_UNVERIFIABLE = "SESSION_LOCATION_UNVERIFIABLE"
    IMPOSSIBLE_TRAVEL = "IMPOSSIBLE_TRAVEL"
    LOW_GPS_ACCURACY = "LOW_GPS_ACCURACY"
    FAST_SCAN = "FAST_SCAN"
    AUTOMATION_DETECTED = "AUTOMATION_DETECTED"
    DEVICE_OFFLINE = "DEVICE_OFFLINE"
    TIMEZONE_MISMATCH = "TIMEZONE_MISMATCH"
    SHARED_DEVICE = "SHARED_DEVICE"
    RAPID_SUCCESSION = "RAPID_SUCCESSION"
    CLUSTERING = "CLUSTERING"
    DETECTION_UNAVAILABLE = "DETECTION_UNAVAILABLE"


class SecurityEventType(str, Enum):
    """Event types written to the security log."""

    ATTENDANCE_MARKED = "attendance_marked"
    ATTENDANCE_REJECTED = "attendance_rejected"
    ATTENDANCE_DUPLICATE = "attendance_duplicate"
    ATTENDANCE_INVALID = "attendance_invalid"
    DETECTION_DEGRADED = "detection_degraded"
    LOCATION_CHECK = "location_check"
    CLIENT_REPORTED = "client_reported"


class AttendanceStatus(str, Enum):
    """Attendance status stored with each record."""

    PRESENT = "present"
