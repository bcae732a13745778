from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, to_mysql_datetime
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def log_security_event(
        self,
        *,
        event_type: str,
        claimant_id: Optional[str],
        payload: Dict[str, Any],
        timestamp: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO security_logs(event_type, user_id, payload, created_at)
                VALUES(%s,%s,%s,%s)
                """,
                (event_type, claimant_id, json.dumps(payload, default=str), to_mysql_datetime(timestamp)),
            )
            return int(cur.lastrowid)
