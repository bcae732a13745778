from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ...attendance.model import LocationHistoryEntry
from ...common.datetime_utils import as_utc
from ...core.constants import (
    GEOFENCE_PENALTY,
    GEOFENCE_RADIUS_METERS,
    IMPOSSIBLE_TRAVEL_PENALTY,
    LOW_GPS_ACCURACY_PENALTY,
    MAX_GPS_ACCURACY_METERS,
    MAX_TRAVEL_SPEED_KMH,
    SESSION_LOCATION_UNPARSEABLE_PENALTY,
    TRAVEL_LOOKBACK_HOURS,
    TRAVEL_WINDOW_MINUTES,
)
from ...core.enums import ReasonCode
from ...geo.distance import distance_meters
from ...geo.model import Coordinate, LocationFix, parse_stored_location
from ...sessions.model import SessionWindow
from ..model import CheckResult
from .base import CheckContext, FraudCheck

logger = logging.getLogger(__name__)

_MIN_ELAPSED = timedelta(seconds=1)


class LocationCheck(FraudCheck):
    """Geofence, impossible travel and GPS accuracy, each scored on its own."""

    name = "location"

    def __init__(self, *, radius_meters: float = GEOFENCE_RADIUS_METERS):
        self._radius = float(radius_meters)

    def verify_location(
        self,
        claim: LocationFix,
        session: SessionWindow,
        history: Sequence[LocationHistoryEntry],
        *,
        claim_time: datetime,
        reported_accuracy: Optional[float] = None,
    ) -> CheckResult:
        result = CheckResult()
        self._check_geofence(result, claim, session)
        self._check_travel(result, claim, history, as_utc(claim_time))

        accuracy = claim.accuracy if claim.accuracy is not None else reported_accuracy
        if accuracy is not None and accuracy > MAX_GPS_ACCURACY_METERS:
            result.add(LOW_GPS_ACCURACY_PENALTY, "Low GPS accuracy detected", ReasonCode.LOW_GPS_ACCURACY)
        return result

    def _check_geofence(self, result: CheckResult, claim: LocationFix, session: SessionWindow) -> None:
        if not session.registered_location:
            return
        try:
            registered = parse_stored_location(session.registered_location)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Session %s location could not be parsed: %s", session.session_id, e)
            result.add(
                SESSION_LOCATION_UNPARSEABLE_PENALTY,
                "Unable to verify session location",
                ReasonCode.SESSION_LOCATION_UNVERIFIABLE,
            )
            return

        distance = distance_meters(claim.coordinate, registered)
        logger.debug("Location check: distance %.1fm from session %s", distance, session.session_id)
        if distance > self._radius:
            result.add(
                GEOFENCE_PENALTY,
                f"Location too far from classroom ({round(distance)}m away)",
                ReasonCode.OUTSIDE_GEOFENCE,
            )

    def _check_travel(
        self,
        result: CheckResult,
        claim: LocationFix,
        history: Sequence[LocationHistoryEntry],
        claim_time: datetime,
    ) -> None:
        lookback_start = claim_time - timedelta(hours=TRAVEL_LOOKBACK_HOURS)
        recent = [h for h in history if as_utc(h.recorded_at) >= lookback_start]
        if not recent:
            return

        last = max(recent, key=lambda h: as_utc(h.recorded_at))
        elapsed = abs(claim_time - as_utc(last.recorded_at))
        if elapsed >= timedelta(minutes=TRAVEL_WINDOW_MINUTES):
            return

        km = distance_meters(claim.coordinate, Coordinate(lat=last.lat, lng=last.lng)) / 1000
        hours = max(elapsed, _MIN_ELAPSED).total_seconds() / 3600
        if km / hours > MAX_TRAVEL_SPEED_KMH:
            result.add(IMPOSSIBLE_TRAVEL_PENALTY, "Impossible travel distance detected", ReasonCode.IMPOSSIBLE_TRAVEL)

    def run(self, ctx: CheckContext) -> CheckResult:
        location = ctx.claim.claimed_location
        if ctx.session is None or location is None:
            return CheckResult()

        signal = ctx.claim.device_signal
        return self.verify_location(
            location,
            ctx.session,
            ctx.recent_locations,
            claim_time=ctx.claim_time,
            reported_accuracy=signal.gps_accuracy_m if signal else None,
        )
