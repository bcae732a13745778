"""Apply database/schema.sql to the configured MySQL database.

Usage:
    APP_ENV=development python scripts/init_db.py
    python scripts/init_db.py --demo-session cs101-demo --qr CS101-DEMO --lat 21.0285 --lng 105.8542
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_guard.attendance_guard.database.bootstrap import apply_schema, list_tables, seed_demo_session


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the attendance-guard tables")
    parser.add_argument("--schema", type=Path, default=REPO_ROOT / "database" / "schema.sql")
    parser.add_argument("--demo-session", metavar="SESSION_ID", help="also upsert an active session starting now")
    parser.add_argument("--qr", default="DEMO-SESSION", help="QR code of the demo session")
    parser.add_argument("--lat", type=float, default=21.0285)
    parser.add_argument("--lng", type=float, default=105.8542)
    parser.add_argument("--minutes", type=int, default=90)
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=args.schema)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )

    if args.demo_session:
        seed_demo_session(
            db_config,
            session_id=args.demo_session,
            qr_code=args.qr,
            lat=args.lat,
            lng=args.lng,
            minutes=args.minutes,
            timezone_name=str(getattr(settings, "EXPECTED_TIMEZONE", "UTC")),
        )
        print(f"OK: Demo session {args.demo_session} active for {args.minutes} minutes (qr={args.qr})")


if __name__ == "__main__":
    main()
