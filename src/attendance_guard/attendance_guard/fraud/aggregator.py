"""Risk aggregation: run every fraud check for a claim and build the verdict.

Store lookups (session, recent locations, attendance history, shared device)
are independent, so they are issued concurrently on a thread pool and bounded
by one timeout. Any lookup failure, timeout or unexpected internal error fails
open: the verdict scores 0 with a "detection unavailable" reason and the write
path is not blocked.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import as_utc, now_utc
from ..core.constants import (
    CLUSTERING_LOOKBACK_DAYS,
    DEFAULT_LOOKUP_TIMEOUT_SECONDS,
    LOCATION_HISTORY_LIMIT,
    SUSPICIOUS_ABOVE,
    TRAVEL_LOOKBACK_HOURS,
    VERIFIED_BELOW,
)
from ..core.enums import CallSite, ReasonCode
from ..core.exceptions import EvaluationCancelled, LookupUnavailable
from ..sessions.model import SessionWindow
from ..sessions.repository import SessionRepository
from .checks.base import CheckContext, FraudCheck
from .factory import FraudCheckFactory
from .model import CheckInClaim, CheckResult, FraudVerdict

logger = logging.getLogger(__name__)

DETECTION_UNAVAILABLE_REASON = "Fraud detection unavailable"

_CANCEL_POLL_SECONDS = 0.05


def degraded_verdict() -> FraudVerdict:
    return FraudVerdict(
        fraud_score=0,
        reasons=(DETECTION_UNAVAILABLE_REASON,),
        reason_codes=(ReasonCode.DETECTION_UNAVAILABLE,),
        is_suspicious=False,
        location_verified=False,
        degraded=True,
    )


def build_verdict(result: CheckResult) -> FraudVerdict:
    score = result.penalty
    return FraudVerdict(
        fraud_score=score,
        reasons=tuple(result.reasons),
        reason_codes=tuple(result.codes),
        is_suspicious=score > SUSPICIOUS_ABOVE,
        location_verified=score < VERIFIED_BELOW,
    )


def resolve_session(session: Optional[SessionWindow], claim: CheckInClaim) -> Optional[SessionWindow]:
    """Return the session only if the claim may be scored against it."""

    if session is None or not session.active:
        return None
    if session.qr_code and claim.claimed_code and claim.claimed_code != session.qr_code:
        return None
    if as_utc(session.end_time) < as_utc(session.start_time):
        return None
    return session


class RiskAggregator:
    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        factory: FraudCheckFactory | None = None,
        call_site: CallSite = CallSite.CLIENT,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS,
        executor: ThreadPoolExecutor | None = None,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._factory = factory or FraudCheckFactory()
        self._call_site = CallSite(call_site)
        self._timeout = float(lookup_timeout)
        self._executor = executor or ThreadPoolExecutor(max_workers=8, thread_name_prefix="fraud-lookup")

    def evaluate(
        self,
        claim: CheckInClaim,
        *,
        now: datetime | None = None,
        call_site: CallSite | None = None,
        cancel_event: threading.Event | None = None,
    ) -> FraudVerdict:
        """Score a claim at server time `now`.

        claim.client_timestamp is reported by the client and never used for scoring.
        """
        claim_time = as_utc(now) if now else now_utc()
        try:
            ctx = self._gather(claim, claim_time, cancel_event)
            checks = self._factory.for_call_site(call_site or self._call_site)
            verdict = build_verdict(self._score(checks, ctx))
        except EvaluationCancelled:
            raise
        except LookupUnavailable as e:
            logger.warning("Fraud detection degraded for claimant=%s: %s", claim.claimant_id, e)
            return degraded_verdict()
        except Exception:
            logger.exception("Fraud detection failed for claimant=%s", claim.claimant_id)
            return degraded_verdict()

        logger.info(
            "Fraud check complete claimant=%s session=%s score=%s reasons=%s",
            claim.claimant_id,
            claim.session_id,
            verdict.fraud_score,
            list(verdict.reasons),
        )
        return verdict

    @staticmethod
    def _score(checks: List[FraudCheck], ctx: CheckContext) -> CheckResult:
        total = CheckResult()
        for check in checks:
            total.extend(check.run(ctx))
        return total

    def _gather(self, claim: CheckInClaim, claim_time: datetime, cancel_event: threading.Event | None) -> CheckContext:
        lookups: Dict[str, Callable[[], object]] = {
            "session": lambda: self._sessions.get_by_id(claim.session_id),
            "locations": lambda: self._attendance.get_recent_locations(
                claim.claimant_id,
                claim_time - timedelta(hours=TRAVEL_LOOKBACK_HOURS),
                limit=LOCATION_HISTORY_LIMIT,
            ),
            "timestamps": lambda: self._attendance.get_attendance_timestamps(
                claim.claimant_id,
                claim_time - timedelta(days=CLUSTERING_LOOKBACK_DAYS),
            ),
        }
        fingerprint = claim.device_signal.canvas_fingerprint if claim.device_signal else None
        if fingerprint:
            lookups["shared_device"] = lambda: self._attendance.count_other_claimants_with_fingerprint(
                fingerprint=fingerprint,
                session_id=claim.session_id,
                claimant_id=claim.claimant_id,
            )

        results = self._run_lookups(lookups, cancel_event)
        return CheckContext(
            claim=claim,
            claim_time=claim_time,
            session=resolve_session(results["session"], claim),
            recent_locations=tuple(results["locations"] or ()),
            attendance_timestamps=tuple(results["timestamps"] or ()),
            shared_device_claimants=int(results.get("shared_device") or 0),
        )

    def run_lookup(self, name: str, fn: Callable[[], object], *, cancel_event: threading.Event | None = None):
        """Single bounded lookup with the same failure semantics as an evaluation."""

        return self._run_lookups({name: fn}, cancel_event)[name]

    def _run_lookups(self, lookups: Dict[str, Callable[[], object]], cancel_event: threading.Event | None) -> Dict[str, object]:
        futures: Dict[str, Future] = {name: self._executor.submit(fn) for name, fn in lookups.items()}
        names = {f: name for name, f in futures.items()}
        pending = set(futures.values())
        deadline = time.monotonic() + self._timeout
        try:
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    raise EvaluationCancelled("Evaluation cancelled by caller")

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    waiting = sorted(names[f] for f in pending)
                    raise LookupUnavailable(f"Lookup timed out after {self._timeout}s: {', '.join(waiting)}")

                poll = remaining if cancel_event is None else min(remaining, _CANCEL_POLL_SECONDS)
                done, pending = wait(pending, timeout=poll, return_when=FIRST_COMPLETED)
                for f in done:
                    exc = f.exception()
                    if exc is not None:
                        raise LookupUnavailable(f"Lookup '{names[f]}' failed: {exc}") from exc
        finally:
            for f in pending:
                f.cancel()

        return {name: f.result() for name, f in futures.items()}

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
