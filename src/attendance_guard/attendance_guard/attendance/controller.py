from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Mapping

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_datetime
from ..container import Container
from ..core.exceptions import DuplicateAttendanceError, FraudRejectedError, LookupUnavailable, ValidationError
from .payloads import parse_device_signal, parse_location
from .qr import decode_image

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please sign in to continue"}), 401
            return view(*args, **kwargs)

        return wrapper

    def _current_claimant() -> str:
        return str(session["user_id"])

    def _json_body() -> Mapping[str, Any]:
        data = request.get_json(silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _form_json(field: str) -> Any:
        raw = request.form.get(field)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            raise ValidationError(f"{field} must be valid JSON")

    def _mark(qr_data: str, data: Mapping[str, Any]):
        try:
            outcome = container.attendance_service.mark_attendance(
                _current_claimant(),
                qr_data,
                location=parse_location(data.get("location")),
                device_signal=parse_device_signal(data.get("device_info")),
                client_timestamp=parse_iso_datetime(data.get("timestamp")),
            )
        except FraudRejectedError as e:
            return jsonify({"success": False, "message": str(e), "verdict": e.verdict.to_dict()}), 403
        except DuplicateAttendanceError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except LookupUnavailable:
            logger.exception("Attendance store unavailable")
            return jsonify({"success": False, "message": "Attendance service temporarily unavailable"}), 503
        except Exception:
            logger.exception("Attendance check-in failed")
            return jsonify({"success": False, "message": "System error while marking attendance"}), 500

        return jsonify({
            "success": True,
            "message": f"Successfully marked present for {outcome.class_name or outcome.session_id}",
            "attendance_id": outcome.attendance_id,
            "session_id": outcome.session_id,
            "verdict": outcome.verdict.to_dict(),
        }), 200

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="api_attendance_checkin")
    @login_required
    def api_attendance_checkin():
        try:
            data = _json_body()
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        return _mark(str(data.get("qr_code") or ""), data)

    @app.route("/api/attendance/checkin/image", methods=["POST"], endpoint="api_attendance_checkin_image")
    @login_required
    def api_attendance_checkin_image():
        """Check-in from an uploaded photo of the session QR code."""
        file = request.files.get("image")
        if not file:
            return jsonify({"success": False, "message": "Missing image file"}), 400
        try:
            qr_data = decode_image(file.stream)
            data = {
                "location": _form_json("location"),
                "device_info": _form_json("device_info"),
                "timestamp": request.form.get("timestamp"),
            }
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        return _mark(qr_data, data)

    @app.route("/api/fraud/location-check", methods=["POST"], endpoint="api_fraud_location_check")
    @login_required
    def api_fraud_location_check():
        try:
            data = _json_body()
            location = parse_location(data.get("location"))
            if location is None:
                raise ValidationError("location is required")
            verdict = container.fraud_service.location_check(
                claimant_id=_current_claimant(),
                session_id=str(data.get("session_id") or ""),
                location=location,
                device_signal=parse_device_signal(data.get("device_info")),
                claimed_code=str(data.get("qr_code") or ""),
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        return jsonify(verdict.to_dict()), 200

    @app.route("/api/fraud/pattern-analysis", methods=["POST"], endpoint="api_fraud_pattern_analysis")
    @login_required
    def api_fraud_pattern_analysis():
        report = container.fraud_service.pattern_report(_current_claimant())
        return jsonify(report.to_dict()), 200

    @app.route("/api/fraud/security-log", methods=["POST"], endpoint="api_fraud_security_log")
    @login_required
    def api_fraud_security_log():
        try:
            data = _json_body()
            accepted = container.fraud_service.log_security_event(
                event_type=str(data.get("event_type") or ""),
                claimant_id=_current_claimant(),
                data=data.get("data") if isinstance(data.get("data"), dict) else None,
                timestamp=parse_iso_datetime(data.get("timestamp")),
            )
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        return jsonify({"success": True, "event_logged": data.get("event_type"), "queued": accepted}), 200
