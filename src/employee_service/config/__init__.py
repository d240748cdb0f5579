from __future__ import annotations

import importlib
import os
from dataclasses import dataclass
from datetime import tzinfo
from types import ModuleType
from typing import Optional, Union

from ..common.datetime_utils import load_timezone
from ..core.constants import (
    DEFAULT_JWT_ISSUER,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_OFFICE_START_HOUR,
    DEFAULT_OFFICE_START_MINUTE,
    DEFAULT_OPERATION_TIMEOUT,
    DEFAULT_TIMEZONE,
)
from ..core.exceptions import ConfigurationError
from ..database.connection import DBConfig


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return f"{__name__}.production"

    if env in {"test", "testing"}:
        return f"{__name__}.testing"

    return f"{__name__}.development"


@dataclass(frozen=True)
class AppSettings:
    """Validated, immutable view of one settings module."""

    secret_key: str
    db: DBConfig
    jwt_secret: str
    jwt_issuer: str
    jwt_ttl: int
    timezone_name: str
    office_start_hour: int
    office_start_minute: int
    late_grace_minutes: int
    operation_timeout: float
    debug: bool = False
    testing: bool = False
    log_level: str = "INFO"
    auto_init_db: bool = False

    @property
    def timezone(self) -> tzinfo:
        return load_timezone(self.timezone_name)


def _positive(name: str, value) -> float:
    if value is None or float(value) <= 0:
        raise ConfigurationError(f"{name} must be greater than zero")
    return float(value)


def settings_from_module(settings: ModuleType) -> AppSettings:
    def get(name, default=None):
        return getattr(settings, name, default)

    jwt_secret = get("JWT_SECRET") or ""
    if not jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured")

    hour = int(get("OFFICE_START_HOUR", DEFAULT_OFFICE_START_HOUR))
    minute = int(get("OFFICE_START_MIN", DEFAULT_OFFICE_START_MINUTE))
    if not 0 <= hour <= 23:
        raise ConfigurationError("OFFICE_START_HOUR must be within 0-23")
    if not 0 <= minute <= 59:
        raise ConfigurationError("OFFICE_START_MIN must be within 0-59")

    grace = int(get("LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES))
    if grace < 0:
        raise ConfigurationError("LATE_GRACE_MINUTES cannot be negative")

    operation_timeout = _positive("OPERATION_TIMEOUT", get("OPERATION_TIMEOUT", DEFAULT_OPERATION_TIMEOUT))
    db = DBConfig.from_dict(
        get("DB_CONFIG") or {},
        connect_timeout=_positive("DB_CONNECT_TIMEOUT", get("DB_CONNECT_TIMEOUT", DEFAULT_OPERATION_TIMEOUT)),
        statement_timeout=operation_timeout,
    )

    return AppSettings(
        secret_key=str(get("SECRET_KEY") or jwt_secret),
        db=db,
        jwt_secret=str(jwt_secret),
        jwt_issuer=str(get("JWT_ISSUER") or DEFAULT_JWT_ISSUER),
        jwt_ttl=int(_positive("JWT_TTL", get("JWT_TTL"))),
        timezone_name=str(get("APP_TIMEZONE") or DEFAULT_TIMEZONE),
        office_start_hour=hour,
        office_start_minute=minute,
        late_grace_minutes=grace,
        operation_timeout=operation_timeout,
        debug=bool(get("DEBUG", False)),
        testing=bool(get("TESTING", False)),
        log_level=str(get("LOG_LEVEL") or "INFO").upper(),
        auto_init_db=bool(get("AUTO_INIT_DB", False)),
    )


def load_settings(module: Optional[Union[str, ModuleType]] = None) -> AppSettings:
    """Import the settings module chosen by APP_ENV (or `module`) and validate it."""
    if module is None:
        module = get_settings_module()
    try:
        if isinstance(module, str):
            module = importlib.import_module(module)
        return settings_from_module(module)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid setting: {exc}") from exc
