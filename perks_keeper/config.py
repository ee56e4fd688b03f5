"""Application configuration."""
from functools import lru_cache
from pathlib import Path

from dateutil import tz
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Perks Keeper"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./data/perks_keeper.db"

    # Offers
    expiry_timezone: str = "America/Chicago"
    expiring_soon_days: int = 3

    # Paths
    base_dir: Path = Path(__file__).parent
    migrations_dir: Path = base_dir / "migrations"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("expiry_timezone")
    @classmethod
    def validate_expiry_timezone(cls, value: str) -> str:
        """Fail closed on a zone name the tz database does not know."""
        if not value:
            raise ValueError("EXPIRY_TIMEZONE must be set.")
        if tz.gettz(value) is None:
            raise ValueError(f"EXPIRY_TIMEZONE is not a known time zone: {value}")
        return value

    @field_validator("expiring_soon_days")
    @classmethod
    def validate_expiring_soon_days(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("EXPIRING_SOON_DAYS must be positive.")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
