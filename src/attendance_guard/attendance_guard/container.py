from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.logger import AuditLogger
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .core.constants import DEFAULT_AUDIT_QUEUE_SIZE, DEFAULT_EXPECTED_TIMEZONE, DEFAULT_LOOKUP_TIMEOUT_SECONDS
from .core.enums import CallSite
from .database.connection import DatabaseConnection, DBConfig
from .fraud.aggregator import RiskAggregator
from .fraud.factory import FraudCheckFactory
from .fraud.service import FraudDetectionService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    audit_repo: AuditRepository

    audit_logger: AuditLogger
    risk_aggregator: RiskAggregator
    attendance_service: AttendanceService
    fraud_service: FraudDetectionService

    def shutdown(self) -> None:
        self.audit_logger.stop()
        self.risk_aggregator.close()


def build_services(
    *,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    audit_repo: AuditRepository,
    conn: Optional[DatabaseConnection] = None,
    expected_timezone: str = DEFAULT_EXPECTED_TIMEZONE,
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS,
    audit_queue_size: int = DEFAULT_AUDIT_QUEUE_SIZE,
    device_check_site: str = CallSite.CLIENT.value,
) -> Container:
    audit_logger = AuditLogger(audit_repo, max_queue=audit_queue_size)
    audit_logger.start()

    risk_aggregator = RiskAggregator(
        sessions_repo,
        attendance_repo,
        factory=FraudCheckFactory(expected_timezone=expected_timezone),
        call_site=CallSite(device_check_site),
        lookup_timeout=lookup_timeout,
    )
    attendance_service = AttendanceService(attendance_repo, sessions_repo, risk_aggregator, audit_logger)
    fraud_service = FraudDetectionService(risk_aggregator, attendance_repo, audit_logger)

    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        audit_logger=audit_logger,
        risk_aggregator=risk_aggregator,
        attendance_service=attendance_service,
        fraud_service=fraud_service,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", 5)),
        pool_size=int(db_config.get("pool_size", 10)),
    )
    conn = DatabaseConnection.get_instance(config)

    return build_services(
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        conn=conn,
        expected_timezone=str(getattr(settings, "EXPECTED_TIMEZONE", DEFAULT_EXPECTED_TIMEZONE)),
        lookup_timeout=float(getattr(settings, "LOOKUP_TIMEOUT_SECONDS", DEFAULT_LOOKUP_TIMEOUT_SECONDS)),
        audit_queue_size=int(getattr(settings, "AUDIT_QUEUE_SIZE", DEFAULT_AUDIT_QUEUE_SIZE)),
        device_check_site=str(getattr(settings, "DEVICE_CHECK_SITE", CallSite.CLIENT.value)),
    )
