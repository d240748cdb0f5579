from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

import pytz

from ..common.datetime_utils import Clock, SystemClock, localize
from ..common.deadline import Deadline, collaborator_call
from ..common.ids import IDGenerator, UUIDv7Generator
from ..common.security import PasswordHasher, TokenClaims, TokenSigner, WerkzeugPasswordHasher
from ..common.validators import caller_role as coerce_caller_role
from ..common.validators import normalize_photo_mime, require_min_length, require_non_empty
from ..core.constants import DEFAULT_OPERATION_TIMEOUT
from ..core.enums import EmployeeStatus, RecordState, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DeletedError,
    DomainError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from .model import Employee, EmployeeProfile, EmployeeUpdate, check_photo
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def require_privileged(role: Role) -> None:
    if not role.is_privileged:
        raise AuthorizationError("only supervisor, manager or hr may do this")


def require_owner_or_privileged(role: Role, caller_id: str, target_id: str) -> None:
    """Privileged roles act on anyone; staff only on their own record."""
    if role.is_privileged:
        return
    if role is Role.STAFF and caller_id and caller_id == target_id:
        return
    raise AuthorizationError("you can only access your own profile")


class _UseCase:
    def __init__(self, employees: EmployeeRepository, *, timeout: float):
        self._employees = employees
        self._timeout = float(timeout)

    def _deadline(self, timeout: Optional[float]) -> Deadline:
        return Deadline(timeout or self._timeout)

    def _missing(self, employee_id: str, deadline: Deadline) -> DomainError:
        """Tell an unknown id apart from a soft-deleted one."""
        with collaborator_call("look up employee state", deadline):
            state = self._employees.get_state(employee_id)
        if state is RecordState.DELETED:
            return DeletedError(f"employee {employee_id} has been deleted")
        return NotFoundError(f"employee {employee_id} not found")

    def _load(self, employee_id: str, deadline: Deadline) -> Employee:
        with collaborator_call("find employee by id", deadline):
            employee = self._employees.find_by_id(employee_id)
        if employee is None:
            raise self._missing(employee_id, deadline)
        return employee


class EmployeeService(_UseCase):
    """Use case: manage employee records with role-scoped access."""

    def __init__(
        self,
        employees: EmployeeRepository,
        *,
        hasher: Optional[PasswordHasher] = None,
        ids: Optional[IDGenerator] = None,
        clock: Optional[Clock] = None,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ):
        super().__init__(employees, timeout=timeout)
        self._hasher = hasher or WerkzeugPasswordHasher()
        self._ids = ids or UUIDv7Generator()
        self._clock = clock or SystemClock()

    def _now(self) -> datetime:
        return localize(self._clock.now(), pytz.utc)

    def _hash(self, password: str, deadline: Deadline) -> str:
        with collaborator_call("hash password", deadline):
            return self._hasher.hash(password)

    def create(
        self,
        *,
        caller_role,
        profile: EmployeeProfile,
        password: str,
        employee_id: Optional[str] = None,
        photo: Optional[bytes] = None,
        photo_mime: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Employee:
        role = coerce_caller_role(caller_role)
        require_privileged(role)

        profile = profile.normalized()
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)
        if photo:
            photo_mime = self._checked_photo(photo, photo_mime)

        deadline = self._deadline(timeout)
        if not employee_id or not employee_id.strip():
            with collaborator_call("generate employee id", deadline):
                employee_id = self._ids.new_id()
        employee_id = employee_id.strip()

        with collaborator_call("find employee by email", deadline):
            existing = self._employees.find_by_email(profile.email)
        if existing is not None:
            raise DuplicateError(f"email {profile.email} is already registered")

        employee = Employee.new(
            employee_id=employee_id,
            profile=profile,
            password_hash=self._hash(password, deadline),
            now=self._now(),
            photo=photo,
            photo_mime=photo_mime,
        )
        with collaborator_call("create employee", deadline):
            self._employees.create(employee)

        logger.info("employee %s created with role %s", employee.employee_id, employee.role.value)
        return employee

    def list_all(self, *, caller_role, timeout: Optional[float] = None) -> List[Employee]:
        require_privileged(coerce_caller_role(caller_role))
        with collaborator_call("list employees", self._deadline(timeout)):
            return list(self._employees.list_all())

    def get(self, *, caller_role, caller_id: str, employee_id: str, timeout: Optional[float] = None) -> Employee:
        role = coerce_caller_role(caller_role)
        employee_id = require_non_empty(employee_id, "employee id")
        require_owner_or_privileged(role, caller_id, employee_id)
        return self._load(employee_id, self._deadline(timeout))

    def get_me(self, *, caller_id: str, timeout: Optional[float] = None) -> Employee:
        caller_id = require_non_empty(caller_id, "employee id")
        return self._load(caller_id, self._deadline(timeout))

    def get_photo(
        self, *, caller_role, caller_id: str, employee_id: str, timeout: Optional[float] = None
    ) -> Tuple[bytes, str]:
        employee = self.get(caller_role=caller_role, caller_id=caller_id, employee_id=employee_id, timeout=timeout)
        if not employee.photo:
            raise NotFoundError(f"employee {employee_id} has no photo")
        return employee.photo, employee.photo_mime or "application/octet-stream"

    def update(self, *, caller_role, caller_id: str, changes: EmployeeUpdate, timeout: Optional[float] = None) -> Employee:
        employee_id = (changes.employee_id or "").strip()
        if not employee_id:
            raise ValidationError("employee id is required")

        role = coerce_caller_role(caller_role)
        require_owner_or_privileged(role, caller_id, employee_id)

        profile = changes.profile.normalized()
        photo_mime = None
        if changes.photo:
            photo_mime = self._checked_photo(changes.photo, changes.photo_mime)
        if changes.password:
            require_min_length(changes.password, "password", MIN_PASSWORD_LENGTH)

        deadline = self._deadline(timeout)
        existing = self._load(employee_id, deadline)

        if not role.is_privileged and (profile.role is not existing.role or profile.status is not existing.status):
            logger.warning("staff %s attempted to change role/status of %s", caller_id, employee_id)
            raise AuthorizationError("only supervisor, manager or hr may change role or status")

        if profile.email != existing.email:
            with collaborator_call("find employee by email", deadline):
                owner = self._employees.find_by_email(profile.email)
            if owner is not None and owner.employee_id != employee_id:
                raise DuplicateError(f"email {profile.email} is already registered")

        now = self._now()
        updated = existing.with_profile(profile, updated_at=now)
        if changes.photo_provided:
            updated = updated.with_photo(changes.photo, photo_mime, updated_at=now)
        if changes.password:
            updated = updated.with_password_hash(self._hash(changes.password, deadline), updated_at=now)

        with collaborator_call("update employee", deadline):
            affected = self._employees.update(updated)
        if not affected:
            raise self._missing(employee_id, deadline)

        logger.info("employee %s updated by %s", employee_id, caller_id)
        return updated

    def update_photo(
        self,
        *,
        caller_role,
        caller_id: str,
        employee_id: str,
        photo: bytes,
        photo_mime: str,
        timeout: Optional[float] = None,
    ) -> Employee:
        role = coerce_caller_role(caller_role)
        employee_id = require_non_empty(employee_id, "employee id")
        require_owner_or_privileged(role, caller_id, employee_id)

        if not photo:
            raise ValidationError("photo is required")
        photo_mime = self._checked_photo(photo, photo_mime)

        deadline = self._deadline(timeout)
        existing = self._load(employee_id, deadline)
        updated = existing.with_photo(photo, photo_mime, updated_at=self._now())

        with collaborator_call("update employee photo", deadline):
            affected = self._employees.update(updated)
        if not affected:
            raise self._missing(employee_id, deadline)

        logger.info("employee %s photo replaced (%s, %d bytes)", employee_id, photo_mime, len(photo))
        return updated

    def delete(self, *, caller_role, employee_id: str, timeout: Optional[float] = None) -> None:
        require_privileged(coerce_caller_role(caller_role))
        employee_id = require_non_empty(employee_id, "employee id")

        deadline = self._deadline(timeout)
        with collaborator_call("delete employee", deadline):
            affected = self._employees.soft_delete(employee_id, self._now())
        if not affected:
            raise self._missing(employee_id, deadline)

        logger.info("employee %s soft-deleted", employee_id)

    @staticmethod
    def _checked_photo(photo: bytes, photo_mime: Optional[str]) -> str:
        mime = normalize_photo_mime(photo_mime)
        check_photo(photo, mime)
        return mime


class AuthService(_UseCase):
    """Use case: verify credentials and issue bearer tokens."""

    def __init__(
        self,
        employees: EmployeeRepository,
        signer: TokenSigner,
        *,
        hasher: Optional[PasswordHasher] = None,
        timeout: float = DEFAULT_OPERATION_TIMEOUT,
    ):
        super().__init__(employees, timeout=timeout)
        self._signer = signer
        self._hasher = hasher or WerkzeugPasswordHasher()

    def login(self, email: str, password: str, *, timeout: Optional[float] = None) -> str:
        if not email or not email.strip() or not password:
            raise ValidationError("email and password are required")

        deadline = self._deadline(timeout)
        with collaborator_call("find employee by email", deadline):
            employee = self._employees.find_by_email(email.strip().lower())
        if employee is None:
            logger.warning("login failed: unknown email")
            raise AuthenticationError("invalid email or password")

        with collaborator_call("verify password", deadline):
            ok = self._hasher.verify(employee.password_hash, password)
        if not ok:
            logger.warning("login failed for employee %s: wrong password", employee.employee_id)
            raise AuthenticationError("invalid email or password")

        if employee.status is not EmployeeStatus.ACTIVE:
            raise AuthenticationError("employee account is not active")

        with collaborator_call("sign token", deadline):
            token = self._signer.generate(employee.employee_id, employee.email, employee.role)

        logger.info("employee %s logged in", employee.employee_id)
        return token

    def authenticate(self, token: str) -> TokenClaims:
        if not token:
            raise AuthenticationError("missing bearer token")
        with collaborator_call("parse token"):
            return self._signer.parse(token)
