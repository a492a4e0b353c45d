import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # SQLite database file stored next to the app as agenda.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "agenda.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Calendar days (slot listing by date, today/week stats) are computed in this zone
    SCHEDULE_TIMEZONE = os.getenv("SCHEDULE_TIMEZONE", "UTC")

    # Confirmation codes
    CONFIRMATION_CODE_LENGTH = int(os.getenv("CONFIRMATION_CODE_LENGTH", "6"))
    CONFIRMATION_CODE_MAX_ATTEMPTS = int(os.getenv("CONFIRMATION_CODE_MAX_ATTEMPTS", "5"))

    # Reject a second slot with the same time and service
    ENFORCE_UNIQUE_SLOTS = os.getenv("ENFORCE_UNIQUE_SLOTS", "false").lower() == "true"

    # Bulk generation covers this many consecutive days
    BULK_WEEK_DAYS = 7

    # Send a confirmation email after each booking
    NOTIFY_ON_BOOKING = os.getenv("NOTIFY_ON_BOOKING", "true").lower() == "true"

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Audit log listing cap
    AUDIT_LOG_LIMIT_MAX = 500

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SCHEDULE_TIMEZONE = "UTC"
    SMTP_HOST = None
