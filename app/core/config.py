"""Application configuration. Load from environment."""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SEASON = 2025


def get_database_url() -> str:
    """Return DATABASE_URL from environment. Raises if missing."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    return url


def get_football_data_key() -> str:
    """Return FOOTBALL_DATA_API_KEY for Football-Data.org. Raises if missing."""
    key = os.environ.get("FOOTBALL_DATA_API_KEY")
    if not key:
        raise RuntimeError("FOOTBALL_DATA_API_KEY environment variable is required for Football-Data.org")
    return key


def has_football_data_key() -> bool:
    return bool(os.environ.get("FOOTBALL_DATA_API_KEY"))


def get_football_data_season() -> int:
    """Stagione Football-Data.org (anno di inizio). Default 2025."""
    raw = os.environ.get("FOOTBALL_DATA_SEASON")
    try:
        return int(raw) if raw else DEFAULT_SEASON
    except ValueError:
        return DEFAULT_SEASON


def get_auth_settings() -> tuple[str, str]:
    """Return (SUPABASE_URL, SUPABASE_ANON_KEY) for token validation. Raises if missing."""
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_ANON_KEY")
    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY are required for authentication")
    return url.rstrip("/"), key


def get_admin_user_ids() -> list[str]:
    """ADMIN_USER_IDS separati da virgola. Lista vuota se non configurata."""
    raw = os.environ.get("ADMIN_USER_IDS", "")
    return [uid.strip() for uid in raw.split(",") if uid.strip()]


def get_cron_secret() -> str | None:
    return os.environ.get("CRON_SECRET") or None


def is_production() -> bool:
    return os.environ.get("APP_ENV", "development").lower() == "production"
