from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta, tzinfo
from typing import Optional

from ..common.datetime_utils import at_local, day_bucket, localize
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_OFFICE_START_HOUR, DEFAULT_OFFICE_START_MINUTE
from ..core.enums import AttendanceStatus
from ..core.exceptions import AttendanceConflictError, ValidationError

MAX_LOCATION_LENGTH = 255


@dataclass(frozen=True)
class AttendancePolicy:
    """Time zone and office hours used to bucket days and judge lateness."""

    timezone: tzinfo
    office_start_hour: int = DEFAULT_OFFICE_START_HOUR
    office_start_minute: int = DEFAULT_OFFICE_START_MINUTE
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    def __post_init__(self) -> None:
        if not 0 <= self.office_start_hour <= 23:
            raise ValueError("office start hour must be within 0-23")
        if not 0 <= self.office_start_minute <= 59:
            raise ValueError("office start minute must be within 0-59")
        if self.late_grace_minutes < 0:
            raise ValueError("late grace minutes cannot be negative")

    def local(self, moment: datetime) -> datetime:
        return localize(moment, self.timezone)

    def day_bucket(self, moment: datetime) -> datetime:
        return day_bucket(moment, self.timezone)

    def office_start(self, bucket: datetime) -> datetime:
        return at_local(bucket.date(), self.timezone, time(self.office_start_hour, self.office_start_minute))

    def late_cutoff(self, bucket: datetime) -> datetime:
        return self.office_start(bucket) + timedelta(minutes=self.late_grace_minutes)


@dataclass(frozen=True)
class CheckInRequest:
    location: str = ""

    def normalized(self) -> "CheckInRequest":
        location = (self.location or "").strip()
        if len(location) > MAX_LOCATION_LENGTH:
            raise ValidationError(f"location must be at most {MAX_LOCATION_LENGTH} characters")
        return CheckInRequest(location=location)


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one attendance record per (employee, day bucket).

    `is_late` is decided at check-in and never recomputed; `check_out_time`
    is set once.
    """

    attendance_id: str
    employee_id: str
    employee_name: str
    location: str
    check_in_time: datetime
    is_late: bool
    work_date: datetime
    check_out_time: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.attendance_id or not self.employee_id:
            raise ValidationError("attendance and employee ids are required")
        if self.check_in_time.tzinfo is None or self.work_date.tzinfo is None:
            raise ValidationError("attendance times must be timezone-aware")
        if self.work_date.time() != time(0, 0):
            raise ValidationError("work date must be truncated to 00:00")

    @property
    def status(self) -> AttendanceStatus:
        if self.check_out_time is None:
            return AttendanceStatus.OPEN
        return AttendanceStatus.CLOSED

    def with_check_out(self, at: datetime) -> "Attendance":
        if self.check_out_time is not None:
            raise AttendanceConflictError("you have already checked out today")
        return replace(self, check_out_time=at)
