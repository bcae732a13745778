from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..core.enums import CallSite
from .checks.base import FraudCheck
from .checks.device_check import CLIENT_PROFILE, SERVER_PROFILE, DeviceCheck, DeviceCheckProfile, SharedDeviceCheck
from .checks.location_check import LocationCheck
from .checks.pattern_check import PatternCheck
from .checks.session_check import SessionCheck
from .checks.timing_check import TimingCheck


@dataclass
class FraudCheckFactory:
    """Factory Pattern: assemble the ordered check pipeline for a call site."""

    expected_timezone: Optional[str] = None

    def device_profile_for(self, site: CallSite) -> DeviceCheckProfile:
        if CallSite(site) == CallSite.SERVER:
            return SERVER_PROFILE
        return CLIENT_PROFILE

    def for_call_site(self, site: CallSite) -> List[FraudCheck]:
        # Order defines the order of reasons in the verdict.
        return [
            SessionCheck(),
            TimingCheck(),
            LocationCheck(),
            DeviceCheck(self.device_profile_for(site), expected_timezone=self.expected_timezone),
            SharedDeviceCheck(),
            PatternCheck(),
        ]
