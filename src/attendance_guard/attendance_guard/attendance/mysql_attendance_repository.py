from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_datetime, to_mysql_datetime
from ..fraud.model import fingerprint_digest
from .model import AttendanceRecord, LocationHistoryEntry
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_recent_locations(self, claimant_id: str, since: datetime, *, limit: int = 5) -> Sequence[LocationHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, session_id, location_lat, location_lng, marked_at
                FROM attendance
                WHERE student_id=%s AND marked_at >= %s
                  AND location_lat IS NOT NULL AND location_lng IS NOT NULL
                ORDER BY marked_at DESC
                LIMIT %s
                """,
                (claimant_id, to_mysql_datetime(since), int(limit)),
            )
            rows = fetchall(cur)
            return [
                LocationHistoryEntry(
                    claimant_id=str(r["student_id"]),
                    session_id=str(r["session_id"]),
                    lat=float(r["location_lat"]),
                    lng=float(r["location_lng"]),
                    recorded_at=normalize_mysql_datetime(r["marked_at"]),
                )
                for r in rows
            ]

    def get_attendance_timestamps(self, claimant_id: str, since: datetime) -> Sequence[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT marked_at
                FROM attendance
                WHERE student_id=%s AND marked_at >= %s
                ORDER BY marked_at DESC
                """,
                (claimant_id, to_mysql_datetime(since)),
            )
            return [normalize_mysql_datetime(r["marked_at"]) for r in fetchall(cur)]

    def count_other_claimants_with_fingerprint(self, *, fingerprint: str, session_id: str, claimant_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(DISTINCT student_id) AS n
                FROM attendance
                WHERE device_fingerprint=%s AND session_id=%s AND student_id<>%s
                """,
                (fingerprint_digest(fingerprint), session_id, claimant_id),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_for_claimant_and_session(self, claimant_id: str, session_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, student_id, session_id, class_name, faculty_id, status, marked_at,
                       qr_code_used, location_lat, location_lng, device_fingerprint, fraud_score
                FROM attendance
                WHERE student_id=%s AND session_id=%s
                """,
                (claimant_id, session_id),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def create_record(
        self,
        *,
        claimant_id: str,
        session_id: str,
        marked_at: datetime,
        class_name: Optional[str] = None,
        faculty_id: Optional[str] = None,
        qr_code_used: Optional[str] = None,
        location_lat: Optional[float] = None,
        location_lng: Optional[float] = None,
        device_fingerprint: Optional[str] = None,
        fraud_score: int = 0,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(student_id, session_id, class_name, faculty_id, status, marked_at,
                                           qr_code_used, location_lat, location_lng, device_fingerprint, fraud_score)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        claimant_id,
                        session_id,
                        class_name,
                        faculty_id,
                        AttendanceStatus.PRESENT.value,
                        to_mysql_datetime(marked_at),
                        qr_code_used,
                        location_lat,
                        location_lng,
                        fingerprint_digest(device_fingerprint),
                        int(fraud_score),
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            # uq_attendance_student_session: a concurrent scan won the insert
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateAttendanceError("Attendance already marked for this session") from e
            raise

    @staticmethod
    def _to_model(r: Dict[str, Any]) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["id"]),
            claimant_id=str(r["student_id"]),
            session_id=str(r["session_id"]),
            class_name=r.get("class_name"),
            faculty_id=r.get("faculty_id"),
            status=AttendanceStatus(r["status"]),
            marked_at=normalize_mysql_datetime(r["marked_at"]),
            qr_code_used=r.get("qr_code_used"),
            location_lat=float(r["location_lat"]) if r.get("location_lat") is not None else None,
            location_lng=float(r["location_lng"]) if r.get("location_lng") is not None else None,
            device_fingerprint=r.get("device_fingerprint"),
            fraud_score=int(r.get("fraud_score") or 0),
        )
