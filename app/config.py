import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False

    # Scoring
    SCORING_ROLES: list[str] = ["scorer", "admin"]
    STRICT_REPLAY: bool = False
    RECENT_MATCHES_LIMIT: int = 10

    @field_validator("SCORING_ROLES")
    @classmethod
    def validate_scoring_roles(cls, v: list[str]) -> list[str]:
        roles = [role.strip().lower() for role in v if role and role.strip()]
        if not roles:
            raise ValueError("SCORING_ROLES cannot be empty")
        return roles

    @field_validator("RECENT_MATCHES_LIMIT")
    @classmethod
    def validate_recent_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RECENT_MATCHES_LIMIT must be at least 1")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Scoring roles: %s", settings.SCORING_ROLES)
    logger.debug("Strict replay: %s", settings.STRICT_REPLAY)
    return settings
