from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.model import AttendancePolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock
from .common.ids import IDGenerator, UUIDv7Generator
from .common.security import JWTSigner, PasswordHasher, TokenSigner, WerkzeugPasswordHasher
from .config import AppSettings
from .database.connection import DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService


@dataclass(frozen=True)
class Container:
    settings: AppSettings
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService


def build_container(
    settings: AppSettings,
    *,
    employees_repo: Optional[EmployeeRepository] = None,
    attendance_repo: Optional[AttendanceRepository] = None,
    hasher: Optional[PasswordHasher] = None,
    signer: Optional[TokenSigner] = None,
    ids: Optional[IDGenerator] = None,
    clock: Optional[Clock] = None,
) -> Container:
    """Wire services from settings; any collaborator can be swapped (tests pass fakes)."""
    policy = AttendancePolicy(
        timezone=settings.timezone,
        office_start_hour=settings.office_start_hour,
        office_start_minute=settings.office_start_minute,
        late_grace_minutes=settings.late_grace_minutes,
    )

    conn = None
    if employees_repo is None or attendance_repo is None:
        conn = DatabaseConnection(settings.db)
    if employees_repo is None:
        employees_repo = MySQLEmployeeRepository(conn)
    if attendance_repo is None:
        attendance_repo = MySQLAttendanceRepository(conn, timezone=policy.timezone)

    hasher = hasher or WerkzeugPasswordHasher()
    signer = signer or JWTSigner(settings.jwt_secret, issuer=settings.jwt_issuer, ttl_seconds=settings.jwt_ttl)
    ids = ids or UUIDv7Generator()
    clock = clock or SystemClock()
    timeout = settings.operation_timeout

    auth_service = AuthService(employees_repo, signer, hasher=hasher, timeout=timeout)
    employee_service = EmployeeService(employees_repo, hasher=hasher, ids=ids, clock=clock, timeout=timeout)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        policy=policy,
        ids=ids,
        clock=clock,
        strategy_factory=AttendanceStrategyFactory(),
        timeout=timeout,
    )

    return Container(
        settings=settings,
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        auth_service=auth_service,
        employee_service=employee_service,
        attendance_service=attendance_service,
    )
