from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Tuple

import pytest
import pytz

from employee_service.attendance.model import Attendance, AttendancePolicy
from employee_service.attendance.service import AttendanceService
from employee_service.common.security import JWTSigner, WerkzeugPasswordHasher
from employee_service.core.enums import RecordState, Role
from employee_service.core.exceptions import AttendanceConflictError, DuplicateError
from employee_service.employees.model import Employee, EmployeeProfile
from employee_service.employees.service import AuthService, EmployeeService

JAKARTA = pytz.timezone("Asia/Jakarta")
JWT_SECRET = "unit-test-jwt-secret-0123456789abcdef"
JWT_ISSUER = "shop-retail-employee-service"


def jakarta(*args) -> datetime:
    return JAKARTA.localize(datetime(*args))


class InMemoryEmployees:
    def __init__(self):
        self.rows: Dict[str, Employee] = {}

    def _live(self):
        return [e for e in self.rows.values() if not e.is_deleted]

    def create(self, employee: Employee) -> None:
        if employee.employee_id in self.rows:
            raise DuplicateError(f"employee {employee.employee_id} already exists")
        if any(e.email == employee.email for e in self._live()):
            raise DuplicateError(f"email {employee.email} already exists")
        self.rows[employee.employee_id] = employee

    def find_by_id(self, employee_id: str) -> Optional[Employee]:
        e = self.rows.get(employee_id)
        return None if e is None or e.is_deleted else e

    def find_by_email(self, email: str) -> Optional[Employee]:
        for e in self._live():
            if e.email == email:
                return e
        return None

    def list_all(self):
        return sorted(self._live(), key=lambda e: e.employee_id)

    def update(self, employee: Employee) -> bool:
        current = self.find_by_id(employee.employee_id)
        if current is None:
            return False
        if any(e.email == employee.email and e.employee_id != employee.employee_id for e in self._live()):
            raise DuplicateError(f"email {employee.email} already exists")
        self.rows[employee.employee_id] = employee
        return True

    def soft_delete(self, employee_id: str, deleted_at: datetime) -> bool:
        current = self.find_by_id(employee_id)
        if current is None:
            return False
        self.rows[employee_id] = current.mark_deleted(deleted_at)
        return True

    def get_state(self, employee_id: str) -> Optional[RecordState]:
        e = self.rows.get(employee_id)
        return None if e is None else e.state


class InMemoryAttendance:
    def __init__(self):
        self.rows: Dict[Tuple[str, date], Attendance] = {}

    def get_for_employee_and_date(self, employee_id: str, work_date: datetime) -> Optional[Attendance]:
        return self.rows.get((employee_id, work_date.date()))

    def create(self, attendance: Attendance) -> None:
        key = (attendance.employee_id, attendance.work_date.date())
        if key in self.rows:
            raise AttendanceConflictError("you've already checked in today")
        self.rows[key] = attendance

    def update_checkout(self, attendance: Attendance) -> bool:
        key = (attendance.employee_id, attendance.work_date.date())
        current = self.rows.get(key)
        if current is None or current.check_out_time is not None:
            return False
        self.rows[key] = replace(current, check_out_time=attendance.check_out_time)
        return True

    def get_recent_for_employee(self, employee_id: str, limit: int):
        items = [r for r in self.rows.values() if r.employee_id == employee_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class SequentialIds:
    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.count = 0

    def new_id(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count:04d}"


def make_profile(**overrides) -> EmployeeProfile:
    fields = dict(
        name="Budi Santoso",
        email="budi@example.com",
        role=Role.STAFF,
        address="Jl. Merdeka 1",
        district="Menteng",
        city="Jakarta Pusat",
        province="DKI Jakarta",
        phone="+62811000111",
        position="Cashier",
        salary=5_000_000,
    )
    fields.update(overrides)
    return EmployeeProfile(**fields)


@pytest.fixture
def clock():
    return FixedClock(jakarta(2025, 1, 6, 8, 0))


@pytest.fixture
def ids():
    return SequentialIds("emp")


@pytest.fixture
def hasher():
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


@pytest.fixture
def signer():
    return JWTSigner(JWT_SECRET, issuer=JWT_ISSUER, ttl_seconds=3600)


@pytest.fixture
def employees():
    return InMemoryEmployees()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def policy():
    return AttendancePolicy(timezone=JAKARTA)


@pytest.fixture
def employee_service(employees, hasher, ids, clock):
    return EmployeeService(employees, hasher=hasher, ids=ids, clock=clock)


@pytest.fixture
def auth_service(employees, signer, hasher):
    return AuthService(employees, signer, hasher=hasher)


@pytest.fixture
def attendance_service(attendance_repo, employees, policy, clock):
    return AttendanceService(attendance_repo, employees, policy=policy, ids=SequentialIds("att"), clock=clock)


@pytest.fixture
def staff(employee_service):
    return employee_service.create(caller_role=Role.HR, profile=make_profile(), password="secret-pass")


@pytest.fixture
def supervisor(employee_service):
    return employee_service.create(
        caller_role=Role.SUPERVISOR,
        profile=make_profile(name="Sari Dewi", email="sari@example.com", role=Role.SUPERVISOR),
        password="boss-password",
    )
