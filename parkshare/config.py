from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "ParkShare API"
    debug: bool = False
    environment: str = "production"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./parkshare.db"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Booking policy
    free_cancellation_hours: int = 2
    late_cancellation_fee_percent: int = 50
    max_first_hour_discount_percent: int = 50
    min_issue_description_length: int = 10


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
