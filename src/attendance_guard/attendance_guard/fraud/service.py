from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..attendance.repository import AttendanceRepository
from ..audit.logger import AuditLogger
from ..common.datetime_utils import as_utc, now_utc
from ..common.validators import require_non_empty
from ..core.constants import CLUSTERING_LOOKBACK_DAYS
from ..core.enums import CallSite, SecurityEventType
from ..core.exceptions import LookupUnavailable
from ..geo.model import LocationFix
from .aggregator import RiskAggregator
from .checks.pattern_check import PatternCheck
from .model import CheckInClaim, DeviceSignal, FraudVerdict, PatternReport, audit_signals

logger = logging.getLogger(__name__)


class FraudDetectionService:
    """Standalone fraud endpoints: location check, pattern report, security log."""

    def __init__(
        self,
        aggregator: RiskAggregator,
        attendance: AttendanceRepository,
        audit: AuditLogger,
        *,
        pattern_check: PatternCheck | None = None,
    ):
        self._aggregator = aggregator
        self._attendance = attendance
        self._audit = audit
        self._patterns = pattern_check or PatternCheck()

    def location_check(
        self,
        *,
        claimant_id: str,
        session_id: str,
        location: LocationFix,
        device_signal: Optional[DeviceSignal] = None,
        claimed_code: str = "",
        now: Optional[datetime] = None,
    ) -> FraudVerdict:
        """Score a claim without writing attendance (server call-site thresholds)."""

        now = as_utc(now) if now else now_utc()
        claim = CheckInClaim(
            claimant_id=require_non_empty(claimant_id, "claimant_id"),
            session_id=require_non_empty(session_id, "session_id"),
            claimed_code=(claimed_code or "").strip(),
            client_timestamp=now,
            claimed_location=location,
            device_signal=device_signal,
        )
        verdict = self._aggregator.evaluate(claim, now=now, call_site=CallSite.SERVER)
        self._audit.log(
            SecurityEventType.LOCATION_CHECK,
            claim.claimant_id,
            {"session_id": claim.session_id, **verdict.to_dict(), **audit_signals(location, device_signal, None, now=now)},
            timestamp=now,
        )
        return verdict

    def pattern_report(self, claimant_id: str, *, now: Optional[datetime] = None) -> PatternReport:
        now = as_utc(now) if now else now_utc()
        claimant_id = require_non_empty(claimant_id, "claimant_id")
        since = now - timedelta(days=CLUSTERING_LOOKBACK_DAYS)
        try:
            timestamps = self._aggregator.run_lookup(
                "timestamps",
                lambda: self._attendance.get_attendance_timestamps(claimant_id, since),
            )
        except LookupUnavailable as e:
            logger.warning("Pattern analysis unavailable for claimant=%s: %s", claimant_id, e)
            return PatternReport(patterns=(), risk_score=0, total_records=0)

        result = self._patterns.analyze_patterns(timestamps, now=now)
        return PatternReport(
            patterns=tuple(result.reasons),
            risk_score=result.penalty,
            total_records=len(timestamps),
        )

    def log_security_event(
        self,
        *,
        event_type: str,
        claimant_id: str,
        data: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> bool:
        event_type = require_non_empty(event_type, "event_type")
        logger.info("Security event %s reported by claimant=%s", event_type, claimant_id)
        return self._audit.log(
            event_type,
            claimant_id,
            {"source": SecurityEventType.CLIENT_REPORTED.value, "data": data or {}},
            timestamp=as_utc(timestamp) if timestamp else None,
        )
