import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as marketplace.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "marketplace.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Create missing tables at startup (use `flask db upgrade` in production)
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 20 minutes
    IDLE_TIMEOUT_SECONDS = 20 * 60

    # bcrypt cost factor
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Password policy
    PASSWORD_MIN_LEN = 6
    PASSWORD_MAX_LEN = 72  # bcrypt only reads the first 72 bytes

    # Brute-force protection
    MAX_LOGIN_ATTEMPTS = 5
    LOCKOUT_MINUTES = 1

    # Attempts at claiming an account when another buyer takes it first
    PURCHASE_MAX_RETRIES = 5

    # Bootstrap admin, created at startup when missing
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@paylasimlihesap.com")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # Reverse proxies in front of the app; X-Forwarded-For is ignored when 0
    TRUSTED_PROXIES = int(os.getenv("TRUSTED_PROXIES", "0"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
