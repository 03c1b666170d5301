import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid float for {name}: {raw!r}") from None


def _bool_env(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dispatch.db")

# Connection pool (ignored for SQLite)
DB_POOL_SIZE = _int_env("DB_POOL_SIZE", "20")
DB_MAX_OVERFLOW = _int_env("DB_MAX_OVERFLOW", "30")
DB_POOL_TIMEOUT = _int_env("DB_POOL_TIMEOUT", "30")
DB_POOL_RECYCLE = _int_env("DB_POOL_RECYCLE", "300")
DB_LOG_SLOW_QUERIES = _bool_env("DB_LOG_SLOW_QUERIES", "true")
DB_SLOW_QUERY_THRESHOLD = _float_env("DB_SLOW_QUERY_THRESHOLD", "1.0")

# Empty means server local time
SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "")

# Auto-completion sweeper
SWEEPER_ENABLED = _bool_env("SWEEPER_ENABLED", "true")
SWEEPER_INTERVAL_SECONDS = _float_env("SWEEPER_INTERVAL_SECONDS", "60")
if SWEEPER_INTERVAL_SECONDS <= 0:
    raise ValueError(f"SWEEPER_INTERVAL_SECONDS must be > 0, got {SWEEPER_INTERVAL_SECONDS}")

# Seed the six default slots on startup when the table is empty
SEED_DEFAULT_TIME_SLOTS = _bool_env("SEED_DEFAULT_TIME_SLOTS", "true")

# Geocoding (Nominatim / OpenStreetMap)
GEOCODING_ENABLED = _bool_env("GEOCODING_ENABLED", "true")
GEOCODING_TIMEOUT_SECONDS = _float_env("GEOCODING_TIMEOUT_SECONDS", "8")
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org").rstrip(
    "/"
)
# Required by Nominatim policy (include a way to contact you)
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "DispatchBros/1.0 (support@dispatchbros.com)")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Dispatch Bros <noreply@dispatchbros.com>")
EMAIL_TIMEOUT_SECONDS = _float_env("EMAIL_TIMEOUT_SECONDS", "15")

# Twilio SMS Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")
SMS_TIMEOUT_SECONDS = _float_env("SMS_TIMEOUT_SECONDS", "10")

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")
