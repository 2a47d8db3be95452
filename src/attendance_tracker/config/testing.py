import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_tracker_test"),
    "connect_timeout": 2,
}

API_PREFIX = "/api"
CORS_ORIGINS = ["http://localhost:3000"]

JWT_SECRET = "test-jwt-secret"
JWT_EXPIRE_DAYS = 1

IDP_JWKS_URL = None
IDP_ISSUER = None
IDP_AUDIENCE = None
IDP_TIMEOUT_SECONDS = 1

STATS_MISSING_DAY_POLICY = "exclude"
READINESS_CACHE_SECONDS = 0

LOG_LEVEL = "WARNING"
LOG_FILE = None

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
