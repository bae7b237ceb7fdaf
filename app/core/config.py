# app/core/config.py
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid number for {name}: {raw!r}") from None


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./meetgo.db")

# Tokens are issued by the auth service; we only decode them
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Pricing used when a booking has no service category
DEFAULT_HOURLY_RATE = _env_float("DEFAULT_HOURLY_RATE", "35")

MIN_BOOKING_HOURS = _env_float("MIN_BOOKING_HOURS", "1")
MAX_BOOKING_HOURS = _env_float("MAX_BOOKING_HOURS", "12")

# Longest range the availability calendar will expand
MAX_CALENDAR_DAYS = _env_int("MAX_CALENDAR_DAYS", "92")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
