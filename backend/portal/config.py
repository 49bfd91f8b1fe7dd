import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so changes in backend/.env take effect on process reload (and not get
# stuck on old environment variables).
#
# For automated tests (SQLite), we need to prevent backend/.env from overriding the
# test DATABASE_URL. Set DISABLE_DOTENV=1 to skip loading .env.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_bool(name: str, default: str = "0") -> bool:
    v = (os.getenv(name, default) or default).strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Default to a local SQLite DB for dev so the backend can start out-of-the-box.
# Use an absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()

# Auth / JWT
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")

# -------------------- One-time codes --------------------
OTP_LENGTH = int(os.getenv("OTP_LENGTH", "6") or "6")
OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "10") or "10")

# -------------------- Sessions --------------------
CANDIDATE_SESSION_TTL_MINUTES = int(os.getenv("CANDIDATE_SESSION_TTL_MINUTES", str(60 * 24 * 7)) or "10080")
ADMIN_SESSION_TTL_MINUTES = int(os.getenv("ADMIN_SESSION_TTL_MINUTES", str(60 * 12)) or "720")
CANDIDATE_COOKIE_NAME = os.getenv("CANDIDATE_COOKIE_NAME", "portal_session")
ADMIN_COOKIE_NAME = os.getenv("ADMIN_COOKIE_NAME", "portal_admin_session")
ADMIN_TOKEN_HEADER = os.getenv("ADMIN_TOKEN_HEADER", "X-Admin-Token")
# Leave off for plain-http local dev; turn on behind TLS.
COOKIE_SECURE = _env_bool("COOKIE_SECURE", "0")

# Seed an admin account at startup when none exists for this email.
ADMIN_BOOTSTRAP_EMAIL = (os.getenv("ADMIN_BOOTSTRAP_EMAIL") or "").strip().lower()
ADMIN_BOOTSTRAP_PASSWORD = os.getenv("ADMIN_BOOTSTRAP_PASSWORD") or ""

# -------------------- Notifications --------------------
# console | smtp | gateway
NOTIFIER_BACKEND = (os.getenv("NOTIFIER_BACKEND") or "console").strip().lower()

SMTP_HOST = (os.getenv("SMTP_HOST") or "").strip()
SMTP_PORT = int((os.getenv("SMTP_PORT") or "587").strip())
SMTP_USER = (os.getenv("SMTP_USER") or "").strip()
SMTP_PASS = (os.getenv("SMTP_PASS") or "").strip()
SMTP_FROM = (os.getenv("SMTP_FROM") or SMTP_USER).strip()
SMTP_TLS = _env_bool("SMTP_TLS", "1")

SMS_GATEWAY_URL = (os.getenv("SMS_GATEWAY_URL") or "").strip()
SMS_GATEWAY_TOKEN = (os.getenv("SMS_GATEWAY_TOKEN") or "").strip()
SMS_GATEWAY_TIMEOUT_S = float(os.getenv("SMS_GATEWAY_TIMEOUT_S", "10") or "10")

# Comma-separated extra CORS origins for the frontend.
FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
]
