"""Constants and defaults shared by the use cases and adapters."""

MAX_PHOTO_BYTES = 5 * 1024 * 1024
ALLOWED_PHOTO_MIME = frozenset({"image/jpeg", "image/png", "image/gif"})

DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_TIMEZONE_OFFSET_MINUTES = 7 * 60
DEFAULT_OFFICE_START_HOUR = 9
DEFAULT_OFFICE_START_MINUTE = 0
DEFAULT_LATE_GRACE_MINUTES = 0

DEFAULT_OPERATION_TIMEOUT = 5.0
DEFAULT_HISTORY_LIMIT = 30
MAX_HISTORY_LIMIT = 366

DEFAULT_JWT_ISSUER = "shop-retail-employee-service"
