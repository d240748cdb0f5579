import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "employee_db"),
}

JWT_SECRET = os.getenv("JWT_SECRET", "dev-jwt-secret-change-me-0123456789")
JWT_ISSUER = os.getenv("JWT_ISSUER", "shop-retail-employee-service")
JWT_TTL = int(os.getenv("JWT_TTL", str(24 * 3600)))

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Jakarta")
OFFICE_START_HOUR = int(os.getenv("OFFICE_START_HOUR", "9"))
OFFICE_START_MIN = int(os.getenv("OFFICE_START_MIN", "0"))
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))

OPERATION_TIMEOUT = float(os.getenv("OPERATION_TIMEOUT", "5"))
DB_CONNECT_TIMEOUT = float(os.getenv("DB_CONNECT_TIMEOUT", "5"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
