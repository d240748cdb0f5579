import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "employee_test_db"),
}

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123"
JWT_ISSUER = "shop-retail-employee-service"
JWT_TTL = 3600

APP_TIMEZONE = "Asia/Jakarta"
OFFICE_START_HOUR = 9
OFFICE_START_MIN = 0
LATE_GRACE_MINUTES = 0

OPERATION_TIMEOUT = 5.0
DB_CONNECT_TIMEOUT = 1.0

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
