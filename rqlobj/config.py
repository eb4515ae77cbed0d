"""
Configuration settings for rqlobj.

Uses Pydantic Settings to load environment variables for logging, SQL
debug tracing and generator defaults. Values are read once and passed
explicitly into `DBU` and the generator; nothing reads them implicitly.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.annotations import DEFAULT_TAG

GENERATED_FILE = "db_generated.py"


class Settings(BaseSettings):
    # Logging
    log_level: str = Field("INFO", alias="RQLOBJ_LOG_LEVEL")
    log_json: bool = Field(False, alias="RQLOBJ_LOG_JSON")

    # Runtime
    debug: bool = Field(False, alias="RQLOBJ_DEBUG")

    # Generator defaults
    tag: str = Field(DEFAULT_TAG, alias="RQLOBJ_TAG")
    output: str = Field(GENERATED_FILE, alias="RQLOBJ_OUTPUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["GENERATED_FILE", "Settings", "get_settings"]
