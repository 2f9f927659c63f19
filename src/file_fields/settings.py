# src/file_fields/settings.py
import logging
from functools import lru_cache
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for upload storage settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from file_fields.settings import get_settings
        settings = get_settings()
        data_dir = settings.data_dir
    """

    # Storage Configuration
    data_dir: str = Field(
        default="data",
        description="Base data root; uploads land in <data_dir>/<bucket>/<extension>"
    )

    dir_mode: int = Field(
        default=0o777,
        description="Permission bits used when creating upload directories"
    )

    # Upload ceiling used when an entity sets no max size of its own
    upload_max_filesize: Union[int, str] = Field(
        default="2M",
        description="Default maximum upload size, bytes or a K/M unit string"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Upper-case the level and make sure logging knows about it."""
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Invalid log_level: {v}")
        return level

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary of environment variables.

        Returns:
            Dictionary of environment variables
        """
        return {
            "DATA_DIR": self.data_dir,
            "DIR_MODE": str(self.dir_mode),
            "UPLOAD_MAX_FILESIZE": str(self.upload_max_filesize),
            "LOG_LEVEL": self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
