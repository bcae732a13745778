from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_datetime(value: Any) -> datetime:
    """Normalize MySQL DATETIME values to timezone-aware UTC.

    Columns are stored as UTC without zone info. mysql-connector can return:
    - datetime.datetime (naive)
    - string (e.g. '2026-02-01 08:30:00')
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (str, bytes)):
        text = value.decode() if isinstance(value, bytes) else value
        dt = datetime.fromisoformat(text.strip())
    else:
        raise TypeError(f"Unsupported MySQL DATETIME value type: {type(value)!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_mysql_datetime(value: datetime) -> datetime:
    """Naive UTC datetime for DATETIME columns."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
