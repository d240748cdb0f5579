from __future__ import annotations

import logging
from typing import List, Optional

from ..common.datetime_utils import Clock, SystemClock
from ..common.deadline import Deadline, collaborator_call
from ..common.ids import IDGenerator, UUIDv7Generator
from ..common.validators import caller_role as coerce_caller_role
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_OPERATION_TIMEOUT, MAX_HISTORY_LIMIT
from ..core.exceptions import AttendanceConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..employees.service import require_owner_or_privileged
from .factory import AttendanceStrategyFactory
from .model import Attendance, AttendancePolicy, CheckInRequest
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: daily check-in/check-out.

    Per (employee, day bucket): no record -> checked in -> checked out.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        policy: AttendancePolicy,
        ids: Optional[IDGenerator] = None,
        clock: Optional[Clock] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ):
        self._attendance = attendance
        self._employees = employees
        self._policy = policy
        self._ids = ids or UUIDv7Generator()
        self._clock = clock or SystemClock()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._timeout = float(timeout)

    def _deadline(self, timeout: Optional[float]) -> Deadline:
        return Deadline(timeout or self._timeout)

    def check_in(self, employee_id: str, request: Optional[CheckInRequest] = None, *, timeout: Optional[float] = None) -> str:
        employee_id = require_non_empty(employee_id, "employee id")
        request = (request or CheckInRequest()).normalized()
        deadline = self._deadline(timeout)

        with collaborator_call("find employee by id", deadline):
            employee = self._employees.find_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"employee {employee_id} not found")

        now = self._policy.local(self._clock.now())
        today = self._policy.day_bucket(now)

        with collaborator_call("find attendance for today", deadline):
            existing = self._attendance.get_for_employee_and_date(employee_id, today)
        if existing is not None:
            raise AttendanceConflictError("you've already checked in today")

        with collaborator_call("generate attendance id", deadline):
            attendance_id = self._ids.new_id()

        office_start = self._policy.office_start(today)
        strategy = self._factory.for_checkin(now=now, cutoff=self._policy.late_cutoff(today))
        decision = strategy.decide_checkin(now=now, office_start=office_start)

        record = Attendance(
            attendance_id=attendance_id,
            employee_id=employee_id,
            employee_name=employee.name,
            location=request.location,
            check_in_time=now,
            is_late=decision.is_late,
            work_date=today,
        )
        with collaborator_call("save attendance", deadline):
            self._attendance.create(record)

        if decision.is_late:
            logger.info("employee %s checked in at %s, %d minutes late", employee_id, now.isoformat(), decision.minutes_late)
        else:
            logger.info("employee %s checked in at %s", employee_id, now.isoformat())
        return attendance_id

    def check_out(self, employee_id: str, *, timeout: Optional[float] = None) -> Attendance:
        employee_id = require_non_empty(employee_id, "employee id")
        deadline = self._deadline(timeout)

        now = self._policy.local(self._clock.now())
        today = self._policy.day_bucket(now)

        with collaborator_call("find attendance for today", deadline):
            record = self._attendance.get_for_employee_and_date(employee_id, today)
        if record is None:
            raise AttendanceConflictError("no check-in record found for today")

        closed = record.with_check_out(now)
        with collaborator_call("update attendance", deadline):
            updated = self._attendance.update_checkout(closed)
        if not updated:
            # another request closed it between the read and the update
            raise AttendanceConflictError("you have already checked out today")

        logger.info("employee %s checked out at %s", employee_id, now.isoformat())
        return closed

    def get_today_record(self, employee_id: str, *, timeout: Optional[float] = None) -> Optional[Attendance]:
        employee_id = require_non_empty(employee_id, "employee id")
        today = self._policy.day_bucket(self._clock.now())
        with collaborator_call("find attendance for today", self._deadline(timeout)):
            return self._attendance.get_for_employee_and_date(employee_id, today)

    def history(
        self,
        *,
        caller_role,
        caller_id: str,
        employee_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        timeout: Optional[float] = None,
    ) -> List[Attendance]:
        employee_id = require_non_empty(employee_id, "employee id")
        require_owner_or_privileged(coerce_caller_role(caller_role), caller_id, employee_id)
        if not 1 <= int(limit) <= MAX_HISTORY_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")

        with collaborator_call("list attendance history", self._deadline(timeout)):
            return list(self._attendance.get_recent_for_employee(employee_id, int(limit)))
