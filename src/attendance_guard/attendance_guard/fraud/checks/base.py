from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ...attendance.model import LocationHistoryEntry
from ...sessions.model import SessionWindow
from ..model import CheckInClaim, CheckResult


@dataclass(frozen=True)
class CheckContext:
    """Point-in-time inputs shared by every check of one evaluation.

    session is None when the session was not found or is not valid for the claim.
    """

    claim: CheckInClaim
    claim_time: datetime
    session: Optional[SessionWindow] = None
    recent_locations: Sequence[LocationHistoryEntry] = field(default_factory=tuple)
    attendance_timestamps: Sequence[datetime] = field(default_factory=tuple)
    shared_device_claimants: int = 0


class FraudCheck(ABC):
    """Strategy Pattern: one independently scored fraud signal."""

    name: str = "check"

    @abstractmethod
    def run(self, ctx: CheckContext) -> CheckResult:
        raise NotImplementedError
