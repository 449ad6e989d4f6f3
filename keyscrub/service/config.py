# keyscrub/service/config.py

"""Application configuration using Pydantic Settings.

Manages environment variables, defaults, and validation rules.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings.

    Loads values from environment variables (prefix 'KEYSCRUB_') or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KEYSCRUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Rule data
    indicators_path: Optional[Path] = Field(
        default=None,
        description="YAML file with indicators, ignore list, and banners. "
        "Defaults to the packaged indicator set.",
    )

    # Execution
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker threads per phase. None lets the executor decide.",
    )

    # File handling
    encoding: str = Field(default="utf-8", description="Text encoding of input files.")

    output_suffix: str = Field(
        default="_sanitized",
        description="Inserted before the extension of each sanitized file name.",
    )

    keylist_name: str = Field(
        default="keylist.txt", description="File name of the keylist artifact."
    )

    # Formatting
    date_format: str = Field(
        default="%Y-%m-%d", description="strftime format for the {date} banner token."
    )

    timestamp_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="strftime format of file records in the keylist.",
    )

    log_level: str = Field(default="INFO", description="Root logging level.")

    @field_validator("encoding", "output_suffix", "keylist_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure file handling values are not empty."""
        if not v.strip():
            raise ValueError("Value cannot be empty")
        return v


# Singleton settings instance
settings = Settings()
