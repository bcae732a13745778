from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..audit.logger import AuditLogger
from ..common.datetime_utils import as_utc, now_utc
from ..common.validators import require_non_empty
from ..core.constants import REJECT_AT_OR_ABOVE
from ..core.enums import SecurityEventType
from ..core.exceptions import DuplicateAttendanceError, FraudRejectedError, ValidationError
from ..fraud.aggregator import RiskAggregator
from ..fraud.model import CheckInClaim, DeviceSignal, FraudVerdict, audit_signals
from ..geo.model import LocationFix
from ..sessions.repository import SessionRepository
from .qr import decode_payload
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInOutcome:
    attendance_id: int
    session_id: str
    class_name: Optional[str]
    verdict: FraudVerdict


class AttendanceService:
    """Attendance write path: the fraud verdict gates every new record."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        aggregator: RiskAggregator,
        audit: AuditLogger,
        *,
        reject_threshold: int = REJECT_AT_OR_ABOVE,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._aggregator = aggregator
        self._audit = audit
        self._reject_threshold = int(reject_threshold)

    def mark_attendance(
        self,
        claimant_id: str,
        qr_data: str,
        *,
        location: Optional[LocationFix] = None,
        device_signal: Optional[DeviceSignal] = None,
        client_timestamp: Optional[datetime] = None,
        now: Optional[datetime] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> CheckInOutcome:
        """Score and, unless rejected, record one check-in.

        Every check runs at server time `now`; client_timestamp is kept for the
        audit trail only. Each outcome, including invalid input, is audited with
        the raw claim signals.
        """
        now = as_utc(now) if now else now_utc()
        signals = audit_signals(location, device_signal, client_timestamp, now=now)

        try:
            claimant_id = require_non_empty(claimant_id, "claimant_id")
            payload = decode_payload(qr_data)
            session = self._aggregator.run_lookup(
                "session_by_code",
                lambda: self._sessions.get_by_code(payload.session_code),
                cancel_event=cancel_event,
            )
            if not session or (payload.session_id and payload.session_id != session.session_id):
                raise ValidationError("Invalid or expired QR code")
            if session.registered_location and location is None:
                raise ValidationError("Location is required to mark attendance for this session")
        except ValidationError as e:
            self._audit.log(SecurityEventType.ATTENDANCE_INVALID, claimant_id or None, {"error": str(e), **signals}, timestamp=now)
            raise

        claim = CheckInClaim(
            claimant_id=claimant_id,
            session_id=session.session_id,
            claimed_code=payload.session_code,
            client_timestamp=as_utc(client_timestamp) if client_timestamp else now,
            claimed_location=location,
            device_signal=device_signal,
        )
        verdict = self._aggregator.evaluate(claim, now=now, cancel_event=cancel_event)
        audit_payload = {"session_id": session.session_id, **verdict.to_dict(), **signals}
        if verdict.degraded:
            self._audit.log(SecurityEventType.DETECTION_DEGRADED, claimant_id, audit_payload, timestamp=now)

        existing = self._aggregator.run_lookup(
            "existing_record",
            lambda: self._attendance.get_for_claimant_and_session(claimant_id, session.session_id),
            cancel_event=cancel_event,
        )
        if existing:
            self._audit.log(SecurityEventType.ATTENDANCE_DUPLICATE, claimant_id, audit_payload, timestamp=now)
            raise DuplicateAttendanceError("Attendance already marked for this session")

        if verdict.fraud_score >= self._reject_threshold:
            self._audit.log(SecurityEventType.ATTENDANCE_REJECTED, claimant_id, audit_payload, timestamp=now)
            logger.info("Attendance rejected claimant=%s session=%s score=%s", claimant_id, session.session_id, verdict.fraud_score)
            raise FraudRejectedError(verdict)

        try:
            attendance_id = self._attendance.create_record(
                claimant_id=claimant_id,
                session_id=session.session_id,
                marked_at=now,
                class_name=session.class_name,
                faculty_id=session.faculty_id,
                qr_code_used=payload.session_code,
                location_lat=location.lat if location else None,
                location_lng=location.lng if location else None,
                device_fingerprint=device_signal.canvas_fingerprint if device_signal else None,
                fraud_score=verdict.fraud_score,
            )
        except DuplicateAttendanceError:
            # lost the insert race to a concurrent scan
            self._audit.log(SecurityEventType.ATTENDANCE_DUPLICATE, claimant_id, audit_payload, timestamp=now)
            raise

        self._audit.log(
            SecurityEventType.ATTENDANCE_MARKED,
            claimant_id,
            {"attendance_id": attendance_id, **audit_payload},
            timestamp=now,
        )
        return CheckInOutcome(
            attendance_id=attendance_id,
            session_id=session.session_id,
            class_name=session.class_name,
            verdict=verdict,
        )
