from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RecordState
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): the service layer depends on this interface, not on a concrete
    database. All finders return live (non-deleted) rows only.
    """

    def create(self, employee: Employee) -> None:
        """Insert; raises DuplicateError when id or live email already exists."""
        raise NotImplementedError

    def find_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def find_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def update(self, employee: Employee) -> bool:
        """Persist a live employee; False when no live row was affected."""
        raise NotImplementedError

    def soft_delete(self, employee_id: str, deleted_at: datetime) -> bool:
        """Mark a live employee deleted; False when no live row was affected."""
        raise NotImplementedError

    def get_state(self, employee_id: str) -> Optional[RecordState]:
        """Lifecycle lookup that also sees deleted rows; None when the id never existed."""
        raise NotImplementedError
