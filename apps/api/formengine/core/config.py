"""Engine configuration with environment variables."""

import logging
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="FORM_ENGINE_", extra="ignore"
    )

    # Environment
    ENV: str = "dev"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Display mode used when a session does not pick one
    DEFAULT_STEP_DISPLAY_MODE: Literal["progress_bar", "tabs"] = "progress_bar"

    # Patterns longer than this are treated as not configured
    MAX_PATTERN_LENGTH: int = 1000

    # Compiled validation patterns kept per process
    PATTERN_CACHE_SIZE: int = 256

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, falling back to INFO for unknown names."""
        level = logging.getLevelName(self.LOG_LEVEL.strip().upper())
        return level if isinstance(level, int) else logging.INFO

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"


settings = Settings()
