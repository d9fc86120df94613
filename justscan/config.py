"""
justscan/config.py
-----------------
Application settings. Every value can be overridden from the environment.
Loaded into Flask with app.config.from_object(Config).
"""

import os


def _get_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "on", "yes")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/justscan")
    MONGO_CREATE_INDEXES = _get_bool("MONGO_CREATE_INDEXES", True)

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", 3000))
    DEBUG = _get_bool("DEBUG", False)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Portal sessions (organization context) expire after this many hours
    PORTAL_SESSION_HOURS = int(os.environ.get("PORTAL_SESSION_HOURS", 24))

    # Campus local time, used for "today" filters (IST by default)
    LOCAL_UTC_OFFSET_MINUTES = int(os.environ.get("LOCAL_UTC_OFFSET_MINUTES", 330))

    # Mail (reminders + feedback)
    MAIL_HOST = os.environ.get("MAIL_HOST")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", 587))
    MAIL_USER = os.environ.get("MAIL_USER")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_FROM = os.environ.get("MAIL_FROM", "JustScan <no-reply@justscan.local>")
    FEEDBACK_EMAIL = os.environ.get("FEEDBACK_EMAIL")

    # Scanner (kiosk side)
    SCAN_API_URL = os.environ.get("SCAN_API_URL", "http://localhost:3000")
    SCAN_CAMERA_INDEX = int(os.environ.get("SCAN_CAMERA_INDEX", 0))
    SCAN_INTERVAL_SECONDS = float(os.environ.get("SCAN_INTERVAL_SECONDS", 0.2))
    SCAN_RECENCY_WINDOW_SECONDS = float(os.environ.get("SCAN_RECENCY_WINDOW_SECONDS", 5.0))
    SCAN_CONTRAST = float(os.environ.get("SCAN_CONTRAST", 1.3))
    SCAN_JPEG_QUALITY = int(os.environ.get("SCAN_JPEG_QUALITY", 80))
    TESSERACT_CMD = os.environ.get("TESSERACT_CMD")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    MONGO_URI = "mongodb://localhost:27017/justscan_test"
    MONGO_CREATE_INDEXES = False
    MAIL_HOST = None
    FEEDBACK_EMAIL = "feedback@justscan.local"
