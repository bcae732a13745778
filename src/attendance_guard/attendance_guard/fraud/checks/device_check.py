from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ...core.constants import DEVICE_OFFLINE_PENALTY, SHARED_DEVICE_PENALTY, TIMEZONE_MISMATCH_PENALTY
from ...core.enums import CallSite, ReasonCode
from ..model import CheckResult, DeviceSignal
from .base import CheckContext, FraudCheck


@dataclass(frozen=True)
class DeviceCheckProfile:
    """Thresholds for one call site.

    The client and server sites historically use different fast-scan limits and
    automation markers; both are kept as-is.
    """

    site: CallSite
    fast_scan_below_ms: float
    fast_scan_penalty: int
    automation_markers: Tuple[str, ...]
    automation_penalty: int


CLIENT_PROFILE = DeviceCheckProfile(
    site=CallSite.CLIENT,
    fast_scan_below_ms=1000,
    fast_scan_penalty=20,
    automation_markers=("bot", "crawler", "spider"),
    automation_penalty=30,
)

SERVER_PROFILE = DeviceCheckProfile(
    site=CallSite.SERVER,
    fast_scan_below_ms=500,
    fast_scan_penalty=15,
    automation_markers=("headlesschrome",),
    automation_penalty=40,
)


class DeviceCheck(FraudCheck):
    """Anomaly markers in the client device fingerprint."""

    name = "device"

    def __init__(self, profile: DeviceCheckProfile, *, expected_timezone: Optional[str] = None):
        self._profile = profile
        self._expected_timezone = expected_timezone

    @property
    def profile(self) -> DeviceCheckProfile:
        return self._profile

    def analyze_device(self, signal: DeviceSignal, *, expected_timezone: Optional[str] = None) -> CheckResult:
        result = CheckResult()
        p = self._profile

        if signal.scan_duration_ms is not None and signal.scan_duration_ms < p.fast_scan_below_ms:
            result.add(p.fast_scan_penalty, "Unusually fast QR scan", ReasonCode.FAST_SCAN)

        ua = (signal.user_agent or "").lower()
        if ua and any(marker in ua for marker in p.automation_markers):
            result.add(p.automation_penalty, "Automated browser detected", ReasonCode.AUTOMATION_DETECTED)

        if signal.online_status is False:
            result.add(DEVICE_OFFLINE_PENALTY, "Device offline during scan", ReasonCode.DEVICE_OFFLINE)

        expected = expected_timezone or self._expected_timezone
        reported = (signal.timezone or "").strip()
        if expected and reported and reported.lower() != expected.strip().lower():
            result.add(TIMEZONE_MISMATCH_PENALTY, "Timezone mismatch detected", ReasonCode.TIMEZONE_MISMATCH)

        return result

    def run(self, ctx: CheckContext) -> CheckResult:
        signal = ctx.claim.device_signal
        if signal is None:
            return CheckResult()
        session_tz = ctx.session.timezone if ctx.session else None
        return self.analyze_device(signal, expected_timezone=session_tz)


class SharedDeviceCheck(FraudCheck):
    """Same canvas fingerprint already used by another claimant in this session."""

    name = "shared_device"

    def run(self, ctx: CheckContext) -> CheckResult:
        result = CheckResult()
        if ctx.shared_device_claimants > 0:
            result.add(SHARED_DEVICE_PENALTY, "Duplicate device fingerprint detected", ReasonCode.SHARED_DEVICE)
        return result
