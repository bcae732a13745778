from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import as_utc
from ...core.constants import EARLY_PENALTY, EARLY_TOLERANCE_MINUTES, LATE_PENALTY, LATE_TOLERANCE_MINUTES
from ...core.enums import ReasonCode
from ...sessions.model import SessionWindow
from ..model import CheckResult
from .base import CheckContext, FraudCheck


class TimingCheck(FraudCheck):
    """Claim time against the session window.

    Tolerances are asymmetric: 15 minutes before start, 30 minutes after end.
    """

    name = "timing"

    def __init__(
        self,
        *,
        early_tolerance: timedelta = timedelta(minutes=EARLY_TOLERANCE_MINUTES),
        late_tolerance: timedelta = timedelta(minutes=LATE_TOLERANCE_MINUTES),
    ):
        self._early = early_tolerance
        self._late = late_tolerance

    def validate_timing(self, claim_time: datetime, window: Optional[SessionWindow]) -> CheckResult:
        result = CheckResult()
        if window is None:
            return result

        claim_time = as_utc(claim_time)
        if as_utc(window.start_time) - claim_time > self._early:
            result.add(EARLY_PENALTY, "Attendance marked too early", ReasonCode.TOO_EARLY)
        if claim_time - as_utc(window.end_time) > self._late:
            result.add(LATE_PENALTY, "Attendance marked too late", ReasonCode.TOO_LATE)
        return result

    def run(self, ctx: CheckContext) -> CheckResult:
        return self.validate_timing(ctx.claim_time, ctx.session)
