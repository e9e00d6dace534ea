"""Application configuration using Pydantic Settings."""

from datetime import date, datetime, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./matchday.db"

    # API-Football (API-Sports direct)
    API_FOOTBALL_KEY: str = ""
    API_FOOTBALL_BASE_URL: str = "https://v3.football.api-sports.io"
    API_FOOTBALL_TIMEOUT_SECONDS: float = 30.0

    # HTTP surface
    API_PREFIX: str = "/api"
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Admin key for manual sync (empty = open)
    ADMIN_API_KEY: str = ""
    ADMIN_API_KEY_HEADER: str = "X-API-Key"

    # Calendar day used for "today" (IANA name, empty = host local zone)
    TIMEZONE: str = ""

    # Sync job
    SCHEDULER_ENABLED: bool = True
    FIXTURES_SYNC_INTERVAL_SECONDS: int = 1800  # 30 minutes

    # Events cache: markers younger than this are served from DB for unfinished fixtures
    EVENTS_CACHE_TTL_SECONDS: int = 60

    # Favourites
    DEFAULT_USER_ID: int = 1

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_timezone(settings: Settings | None = None) -> tzinfo:
    """Timezone that defines the server's calendar day."""
    settings = settings or get_settings()
    if settings.TIMEZONE:
        return ZoneInfo(settings.TIMEZONE)
    return datetime.now().astimezone().tzinfo


def today_local(settings: Settings | None = None) -> date:
    """Today's calendar date in the server's timezone."""
    return datetime.now(get_timezone(settings)).date()
