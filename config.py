# config.py
import os

def _to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}

def _to_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


class Config:
    # ── Core ─────────────────────────────────────────────────────────────────
    DEBUG = _to_bool(os.environ.get("DEBUG") or os.environ.get("FLASK_DEBUG"), False)
    TESTING = False
    APP_NAME = os.environ.get("APP_NAME", "CityConnect API")
    PORT = _to_int(os.environ.get("PORT"), 5000)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "UTC")

    # ── Supabase (auth + tables) ────────────────────────────────────────────
    SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
    # Optional: needed to delete an orphaned auth user when signup fails halfway
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")

    # ── HTTP surface ────────────────────────────────────────────────────────
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
    TRUST_PROXY = _to_bool(os.environ.get("TRUST_PROXY"), True)
    MAX_CONTENT_LENGTH = _to_int(os.environ.get("MAX_CONTENT_LENGTH"), 10 * 1024 * 1024)

    # fixed window, per client address, /api/* only
    RATE_LIMIT_ENABLED = _to_bool(os.environ.get("RATE_LIMIT_ENABLED"), True)
    RATE_LIMIT_MAX = _to_int(os.environ.get("RATE_LIMIT_MAX"), 100)
    RATE_LIMIT_WINDOW_SEC = _to_int(os.environ.get("RATE_LIMIT_WINDOW_SEC"), 15 * 60)

    # ── Placeholders used by the planner / staff dashboard ─────────────────
    DEFAULT_ROUTE_FARE = _to_int(os.environ.get("DEFAULT_ROUTE_FARE"), 20)
    AVG_TRIP_CAPACITY = _to_int(os.environ.get("AVG_TRIP_CAPACITY"), 18)


class ProductionConfig(Config):
    DEBUG = False


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    SUPABASE_URL = "http://supabase.test"
    SUPABASE_ANON_KEY = "test-anon-key"
    SUPABASE_SERVICE_ROLE_KEY = ""
    FRONTEND_URL = "http://localhost:3000"
    APP_TIMEZONE = "UTC"
