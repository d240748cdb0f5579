from __future__ import annotations

from typing import Optional

from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def normalize_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "email").lower()
    local, sep, domain = email.partition("@")
    if not sep or not local or "." not in domain or " " in email:
        raise ValidationError("invalid email format")
    return email


def normalize_photo_mime(value: Optional[str]) -> str:
    mime = (value or "").strip().lower()
    return "image/jpeg" if mime == "image/jpg" else mime


def parse_role(value) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"invalid role: {value!r}") from None


def parse_status(value) -> EmployeeStatus:
    if isinstance(value, EmployeeStatus):
        return value
    try:
        return EmployeeStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"invalid status: {value!r}") from None


def caller_role(value) -> Role:
    """Coerce the caller's role taken from a token; unknown roles get no access."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value))
    except ValueError:
        raise AuthorizationError("unknown caller role") from None
