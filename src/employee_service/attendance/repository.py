from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Attendance


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: str, work_date: datetime) -> Optional[Attendance]:
        raise NotImplementedError

    def create(self, attendance: Attendance) -> None:
        """Insert; raises AttendanceConflictError if (employee, work_date) already exists."""
        raise NotImplementedError

    def update_checkout(self, attendance: Attendance) -> bool:
        """Store check-out on a still-open record; False when nothing was open."""
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[Attendance]:
        raise NotImplementedError
