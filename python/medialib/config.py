"""Application settings loaded from environment variables.

Environment Configuration:
    MEDIALIB_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string (required)
    USER_DATA_RETENTION_DAYS: Days a detached UserData row is kept before purge

Redis / Celery Configuration:
    REDIS_URL: Redis connection string (required for worker)
    CELERY_BROKER_URL: Celery broker URL (defaults to REDIS_URL)
    CELERY_RESULT_BACKEND: Celery result backend URL (defaults to REDIS_URL)
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - USER_DATA_RETENTION_DAYS must be at least 1
    - REDIS_URL (or an explicit broker URL) is required in staging and prod
    """

    medialib_env: Environment = Field(default=Environment.LOCAL, alias="MEDIALIB_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Redis / Celery settings
    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    celery_broker_url: str | None = Field(default=None, alias="CELERY_BROKER_URL")
    celery_result_backend: str | None = Field(default=None, alias="CELERY_RESULT_BACKEND")

    # Detached UserData retention
    user_data_retention_days: int = Field(default=90, alias="USER_DATA_RETENTION_DAYS")

    # Logging
    log_json: bool = Field(default=True, alias="LOG_JSON")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure settings are coherent for the selected environment."""
        if self.user_data_retention_days < 1:
            raise ValueError("USER_DATA_RETENTION_DAYS must be at least 1")

        if self.medialib_env in (Environment.STAGING, Environment.PROD):
            if not self.effective_celery_broker_url:
                raise ValueError(
                    f"REDIS_URL or CELERY_BROKER_URL is required for "
                    f"MEDIALIB_ENV={self.medialib_env.value}"
                )

        return self

    @property
    def effective_celery_broker_url(self) -> str | None:
        """Return Celery broker URL, falling back to REDIS_URL if not set."""
        return self.celery_broker_url or self.redis_url

    @property
    def effective_celery_result_backend(self) -> str | None:
        """Return Celery result backend URL, falling back to REDIS_URL if not set."""
        return self.celery_result_backend or self.redis_url


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
