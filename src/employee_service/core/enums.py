from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Employee role used for authorization."""

    SUPERVISOR = "supervisor"
    MANAGER = "manager"
    HR = "hr"
    STAFF = "staff"

    @property
    def is_privileged(self) -> bool:
        return self in PRIVILEGED_ROLES


PRIVILEGED_ROLES = frozenset({Role.SUPERVISOR, Role.MANAGER, Role.HR})


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class RecordState(str, Enum):
    """Lifecycle of a persisted employee row (soft delete)."""

    ALIVE = "alive"
    DELETED = "deleted"


class AttendanceStatus(str, Enum):
    """Daily attendance state: OPEN after check-in, CLOSED after check-out."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
