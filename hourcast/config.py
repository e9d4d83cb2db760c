"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_url
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the hourcast service."""
    model_config = SettingsConfigDict(env_prefix="HOURCAST_", extra="ignore")

    forecast_source: str = "open_meteo"  # options: open_meteo
    forecast_days: int = 1
    forecast_timezone: str = "auto"
    http_timeout_seconds: float = 10.0
    store_redis_url: str | None = None
    store_prefix: str = "hourcast:"
    allow_unsuitable_tasks_default: bool = False
    api_key: str | None = None
    preview_ttl_seconds: float = 3600.0
    preview_max_entries: int = 1000
    log_level: str = "INFO"

    @field_validator("forecast_source", mode="after")
    @classmethod
    def lowercase_source(cls, v: str) -> str:
        """Source names are matched case-insensitively."""
        return v.strip().lower()

    @field_validator("forecast_days", mode="after")
    @classmethod
    def positive_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError("forecast_days must be at least 1")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    dumped = settings.model_dump()
    dumped["store_redis_url"] = mask_url(dumped["store_redis_url"])
    logger.debug(f"Loaded settings: {dumped}")
