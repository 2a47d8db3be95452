import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_tracker"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "8")),
}

API_PREFIX = os.getenv("API_PREFIX", "/api")
CORS_ORIGINS = [o.strip() for o in os.getenv("CLIENT_URLS", "").split(",") if o.strip()]

JWT_SECRET = os.getenv("JWT_SECRET", "please-set-JWT_SECRET")
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "30"))

IDP_JWKS_URL = os.getenv("IDP_JWKS_URL") or None
IDP_ISSUER = os.getenv("IDP_ISSUER") or None
IDP_AUDIENCE = os.getenv("IDP_AUDIENCE") or None
IDP_TIMEOUT_SECONDS = int(os.getenv("IDP_TIMEOUT_SECONDS", "5"))

STATS_MISSING_DAY_POLICY = os.getenv("STATS_MISSING_DAY_POLICY", "exclude")
READINESS_CACHE_SECONDS = int(os.getenv("READINESS_CACHE_SECONDS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
