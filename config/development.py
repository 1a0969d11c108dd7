import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance"),
}

# HMAC key for student identity tokens
QR_SECRET = os.getenv("QR_SECRET", "dev-qr-secret")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
TIMEZONE_NAME = os.getenv("TIMEZONE_NAME", "local")

# Lets a scan request carry time_in / custom_date for manual testing
ALLOW_SCAN_TIME_OVERRIDES = bool(int(os.getenv("ALLOW_SCAN_TIME_OVERRIDES", "1")))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
