from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_datetime
from .model import SessionWindow
from .repository import SessionRepository

_COLUMNS = "id, class_name, faculty_id, start_time, end_time, is_active, location, qr_code, timezone"


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[SessionWindow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE id=%s", (session_id,))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def get_by_code(self, qr_code: str) -> Optional[SessionWindow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE qr_code=%s AND is_active=1 LIMIT 1",
                (qr_code,),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    @staticmethod
    def _to_model(r: Dict[str, Any]) -> SessionWindow:
        return SessionWindow(
            session_id=str(r["id"]),
            class_name=r.get("class_name"),
            faculty_id=r.get("faculty_id"),
            start_time=normalize_mysql_datetime(r["start_time"]),
            end_time=normalize_mysql_datetime(r["end_time"]),
            active=bool(r.get("is_active")),
            registered_location=r.get("location"),
            qr_code=r.get("qr_code"),
            timezone=r.get("timezone"),
        )
