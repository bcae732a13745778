from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ...common.datetime_utils import as_utc
from ...core.constants import (
    CLUSTERING_AVG_GAP_MINUTES,
    CLUSTERING_LOOKBACK_DAYS,
    CLUSTERING_MIN_RECORDS,
    CLUSTERING_PENALTY,
    RAPID_SUCCESSION_LOOKBACK_DAYS,
    RAPID_SUCCESSION_MINUTES,
    RAPID_SUCCESSION_PENALTY,
)
from ...core.enums import ReasonCode
from ..model import CheckResult
from .base import CheckContext, FraudCheck


class PatternCheck(FraudCheck):
    """Rapid succession and clustering over the claimant's own history.

    Missing or short history is never treated as suspicious.
    """

    name = "pattern"

    def analyze_patterns(self, timestamps: Sequence[datetime], *, now: datetime, claim_time: Optional[datetime] = None) -> CheckResult:
        """Score stored timestamps; claim_time (if given) joins the rapid-succession scan."""

        result = CheckResult()
        now = as_utc(now)
        stored = sorted((as_utc(t) for t in timestamps), reverse=True)

        rapid_since = now - timedelta(days=RAPID_SUCCESSION_LOOKBACK_DAYS)
        recent = [t for t in stored if t >= rapid_since]
        if claim_time is not None:
            recent = sorted(recent + [as_utc(claim_time)], reverse=True)
        if self._has_rapid_pair(recent):
            result.add(RAPID_SUCCESSION_PENALTY, "Multiple rapid attendance marks detected", ReasonCode.RAPID_SUCCESSION)

        cluster_since = now - timedelta(days=CLUSTERING_LOOKBACK_DAYS)
        monthly = [t for t in stored if t >= cluster_since]
        if len(monthly) >= CLUSTERING_MIN_RECORDS:
            gaps = [(monthly[i - 1] - monthly[i]).total_seconds() for i in range(1, len(monthly))]
            avg_gap = sum(gaps) / len(gaps)
            if avg_gap < CLUSTERING_AVG_GAP_MINUTES * 60:
                result.add(CLUSTERING_PENALTY, "Suspicious attendance clustering detected", ReasonCode.CLUSTERING)

        return result

    @staticmethod
    def _has_rapid_pair(desc: Sequence[datetime]) -> bool:
        limit = timedelta(minutes=RAPID_SUCCESSION_MINUTES)
        for i in range(1, len(desc)):
            if desc[i - 1] - desc[i] < limit:
                return True
        return False

    def run(self, ctx: CheckContext) -> CheckResult:
        return self.analyze_patterns(ctx.attendance_timestamps, now=ctx.claim_time, claim_time=ctx.claim_time)
