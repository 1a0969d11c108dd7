import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance"),
}

# No default: the app refuses to start without it.
QR_SECRET = os.getenv("QR_SECRET", "")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
TIMEZONE_NAME = os.getenv("TIMEZONE_NAME", "local")

ALLOW_SCAN_TIME_OVERRIDES = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
