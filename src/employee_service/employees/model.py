from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

from ..common.validators import normalize_email, parse_role, parse_status, require_non_empty
from ..core.constants import ALLOWED_PHOTO_MIME, MAX_PHOTO_BYTES
from ..core.enums import EmployeeStatus, RecordState, Role
from ..core.exceptions import PhotoTooLargeError, ValidationError

REQUIRED_TEXT_FIELDS = ("name", "email", "address", "district", "city", "province", "phone")


def _require_salary(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("salary must be an integer amount in the smallest currency unit")
    if value < 0:
        raise ValidationError("salary cannot be negative")
    return value


def check_photo(photo: bytes, photo_mime: Optional[str]) -> None:
    if len(photo) > MAX_PHOTO_BYTES:
        raise PhotoTooLargeError(f"photo exceeds {MAX_PHOTO_BYTES // (1024 * 1024)} MiB")
    if photo_mime not in ALLOWED_PHOTO_MIME:
        raise ValidationError("photo must be a JPEG, PNG or GIF image")


@dataclass(frozen=True)
class EmployeeProfile:
    """Caller-supplied profile fields for Create and Update."""

    name: str
    email: str
    role: Role
    address: str
    district: str
    city: str
    province: str
    phone: str
    position: str = ""
    salary: int = 0
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    birth_date: Optional[date] = None

    def normalized(self) -> "EmployeeProfile":
        """Trim text, lowercase the email and check the required-field contract."""
        return replace(
            self,
            name=require_non_empty(self.name, "name"),
            email=normalize_email(self.email),
            role=parse_role(self.role),
            address=require_non_empty(self.address, "address"),
            district=require_non_empty(self.district, "district"),
            city=require_non_empty(self.city, "city"),
            province=require_non_empty(self.province, "province"),
            phone=require_non_empty(self.phone, "phone"),
            position=(self.position or "").strip(),
            salary=_require_salary(self.salary),
            status=parse_status(self.status),
        )


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Immutable; every change goes through a `with_*` method that returns a new
    instance, and the invariants below are re-checked on construction.
    """

    employee_id: str
    name: str
    email: str
    password_hash: str = field(repr=False)
    role: Role
    address: str
    district: str
    city: str
    province: str
    phone: str
    position: str = ""
    salary: int = 0
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    birth_date: Optional[date] = None
    photo: Optional[bytes] = field(default=None, repr=False)
    photo_mime: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    state: RecordState = RecordState.ALIVE
    deleted_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.employee_id or not self.employee_id.strip():
            raise ValidationError("employee id cannot be empty")
        for name in REQUIRED_TEXT_FIELDS:
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValidationError(f"{name} is required")
        if not self.password_hash:
            raise ValidationError("password hash cannot be empty")
        if not isinstance(self.role, Role):
            raise ValidationError("invalid role")
        if not isinstance(self.status, EmployeeStatus):
            raise ValidationError("invalid status")
        _require_salary(self.salary)
        if self.photo:
            check_photo(self.photo, self.photo_mime)
        if (self.state is RecordState.DELETED) != (self.deleted_at is not None):
            raise ValidationError("deleted employees must carry a deletion time")

    @classmethod
    def new(
        cls,
        *,
        employee_id: str,
        profile: EmployeeProfile,
        password_hash: str,
        now: datetime,
        photo: Optional[bytes] = None,
        photo_mime: Optional[str] = None,
    ) -> "Employee":
        return cls(
            employee_id=employee_id,
            password_hash=password_hash,
            photo=photo or None,
            photo_mime=photo_mime if photo else None,
            created_at=now,
            updated_at=now,
            **vars(profile),
        )

    @property
    def is_deleted(self) -> bool:
        return self.state is RecordState.DELETED

    @property
    def profile(self) -> EmployeeProfile:
        return EmployeeProfile(
            name=self.name,
            email=self.email,
            role=self.role,
            address=self.address,
            district=self.district,
            city=self.city,
            province=self.province,
            phone=self.phone,
            position=self.position,
            salary=self.salary,
            status=self.status,
            birth_date=self.birth_date,
        )

    def with_profile(self, profile: EmployeeProfile, *, updated_at: datetime) -> "Employee":
        return replace(self, updated_at=updated_at, **vars(profile))

    def with_photo(self, photo: Optional[bytes], photo_mime: Optional[str], *, updated_at: datetime) -> "Employee":
        if not photo:
            return replace(self, photo=None, photo_mime=None, updated_at=updated_at)
        return replace(self, photo=photo, photo_mime=photo_mime, updated_at=updated_at)

    def with_password_hash(self, password_hash: str, *, updated_at: datetime) -> "Employee":
        return replace(self, password_hash=password_hash, updated_at=updated_at)

    def mark_deleted(self, at: datetime) -> "Employee":
        return replace(self, state=RecordState.DELETED, deleted_at=at, updated_at=at)


@dataclass(frozen=True)
class EmployeeUpdate:
    """Full-profile update request.

    `password` None or "" keeps the stored hash. `photo` None keeps the stored
    photo, b"" removes it, any other bytes replace it.
    """

    employee_id: str
    profile: EmployeeProfile
    password: Optional[str] = field(default=None, repr=False)
    photo: Optional[bytes] = field(default=None, repr=False)
    photo_mime: Optional[str] = None

    @property
    def photo_provided(self) -> bool:
        return self.photo is not None
