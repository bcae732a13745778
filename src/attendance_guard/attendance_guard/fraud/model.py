from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..common.datetime_utils import as_utc
from ..core.enums import ReasonCode
from ..geo.model import LocationFix


def fingerprint_digest(fingerprint: Optional[str]) -> Optional[str]:
    # Canvas fingerprints are data URLs; only their hash is stored or logged.
    if not fingerprint:
        return None
    return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class DeviceSignal:
    """Client-supplied fingerprint. Untrusted: used for anomaly heuristics only."""

    user_agent: Optional[str] = None
    screen_resolution: Optional[str] = None
    color_depth: Optional[int] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    platform: Optional[str] = None
    canvas_fingerprint: Optional[str] = None
    cookies_enabled: Optional[bool] = None
    online_status: Optional[bool] = None
    scan_duration_ms: Optional[float] = None
    gps_accuracy_m: Optional[float] = None

    def audit_summary(self) -> Dict[str, Any]:
        return {
            "fingerprint_digest": fingerprint_digest(self.canvas_fingerprint),
            "user_agent": self.user_agent,
            "scan_duration_ms": self.scan_duration_ms,
            "timezone": self.timezone,
            "online_status": self.online_status,
            "platform": self.platform,
        }


@dataclass(frozen=True)
class CheckInClaim:
    claimant_id: str
    session_id: str
    claimed_code: str
    client_timestamp: datetime
    claimed_location: Optional[LocationFix] = None
    device_signal: Optional[DeviceSignal] = None


@dataclass(frozen=True)
class Penalty:
    points: int
    reason: str
    code: ReasonCode

    def __post_init__(self):
        if self.points < 0:
            raise ValueError("Penalty points must not be negative")


@dataclass
class CheckResult:
    """Named penalty contributions from one check, in the order they fired."""

    penalties: List[Penalty] = field(default_factory=list)

    def add(self, points: int, reason: str, code: ReasonCode) -> None:
        self.penalties.append(Penalty(points=points, reason=reason, code=code))

    def extend(self, other: "CheckResult") -> None:
        self.penalties.extend(other.penalties)

    @property
    def penalty(self) -> int:
        return sum(p.points for p in self.penalties)

    @property
    def reasons(self) -> List[str]:
        return [p.reason for p in self.penalties]

    @property
    def codes(self) -> List[ReasonCode]:
        return [p.code for p in self.penalties]


@dataclass(frozen=True)
class FraudVerdict:
    fraud_score: int
    reasons: Tuple[str, ...]
    reason_codes: Tuple[ReasonCode, ...]
    is_suspicious: bool
    location_verified: bool
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            "fraud_score": self.fraud_score,
            "reasons": list(self.reasons),
            "reason_codes": [c.value for c in self.reason_codes],
            "is_suspicious": self.is_suspicious,
            "location_verified": self.location_verified,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class PatternReport:
    """Standalone pattern analysis result for a claimant."""

    patterns: Tuple[str, ...]
    risk_score: int
    total_records: int

    def to_dict(self) -> dict:
        return {
            "patterns": list(self.patterns),
            "risk_score": self.risk_score,
            "total_records": self.total_records,
        }


def audit_signals(
    location: Optional[LocationFix],
    device_signal: Optional[DeviceSignal],
    client_timestamp: Optional[datetime],
    *,
    now: datetime,
) -> Dict[str, Any]:
    """Raw claim signals recorded with every check-in security event."""
    drift = None
    if client_timestamp is not None:
        drift = round((as_utc(client_timestamp) - as_utc(now)).total_seconds(), 3)
    return {
        "location": {"lat": location.lat, "lng": location.lng, "accuracy": location.accuracy} if location else None,
        "device": device_signal.audit_summary() if device_signal else None,
        "client_timestamp": as_utc(client_timestamp).isoformat() if client_timestamp else None,
        "client_clock_drift_seconds": drift,
    }
