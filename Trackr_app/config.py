# Trackr_app/config.py
import os
from pathlib import Path
from datetime import timedelta

# ===== Paths / DB =====
BASE_DIR = Path(__file__).resolve().parents[1]

# DATABASE_URL (e.g. postgresql://...) wins over the SQLite file path
DATABASE_URL = os.environ.get('DATABASE_URL')
TRACKR_DB_PATH = os.environ.get('TRACKR_DB_PATH')
if TRACKR_DB_PATH:
    DB_PATH = Path(TRACKR_DB_PATH).resolve()
else:
    DB_PATH = BASE_DIR / "instance" / "trackr.db"

if DATABASE_URL:
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
else:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    SQLALCHEMY_DATABASE_URI = f"sqlite:///{DB_PATH.as_posix()}"

SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ENGINE_OPTIONS = {
    "pool_pre_ping": True,
}

# ===== Flask secret / sessions =====
SECRET_KEY = (
    os.environ.get("TRACKR_SECRET_KEY")
    or os.environ.get("SECRET_KEY")
    or "dev-secret-change-me"
)

SESSION_COOKIE_NAME = os.environ.get("TRACKR_SESSION_COOKIE", "session")

# Server-side sessions: "sqlalchemy" (sessions table) or "redis"
SESSION_TYPE = os.environ.get("SESSION_TYPE", "sqlalchemy")
SESSION_SQLALCHEMY_TABLE = "sessions"
SESSION_REDIS_URL = os.environ.get("SESSION_REDIS_URL", "redis://127.0.0.1:6379/0")
SESSION_PERMANENT = True
PERMANENT_SESSION_LIFETIME = timedelta(days=7)
SESSION_COOKIE_SAMESITE = "Lax"

# ===== OpenID Connect provider =====
OIDC_ISSUER_URL = os.environ.get("OIDC_ISSUER_URL", "")
OIDC_CLIENT_ID = os.environ.get("OIDC_CLIENT_ID", "")
OIDC_CLIENT_SECRET = os.environ.get("OIDC_CLIENT_SECRET", "")
OIDC_REDIRECT_URI = os.environ.get("OIDC_REDIRECT_URI", "")
OIDC_SCOPES = os.environ.get("OIDC_SCOPES", "openid email profile")
OIDC_TIMEOUT = int(os.environ.get("OIDC_TIMEOUT", "10"))

# ===== Clock =====
# IANA name, e.g. "Asia/Seoul". Empty = server local time.
APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "")

# ===== Rate limiting =====
RATELIMIT_ENABLED = os.environ.get("RATELIMIT_ENABLED", "true").lower() == "true"
RATELIMIT_STORAGE_URI = os.environ.get("RATE_LIMIT_REDIS_URL", "memory://")

DEBUG = False
