"""CLI settings, read from REDIS_CONN_* environment variables."""

from enum import StrEnum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CLISettings(BaseSettings):
    """Defaults for the redis-conn-config command line."""

    log_level: LogLevel = Field(
        default=LogLevel.WARNING, description="Root log level for the CLI process"
    )
    output_format: Literal["text", "json"] = Field(
        default="text", description="Default output format when --format is not given"
    )
    strict: bool = Field(
        default=False, description="Report undeclared keys in value sets as errors"
    )
    include_env: bool = Field(
        default=False,
        description="Layer REDIS_* environment variables under value-set files",
    )

    model_config = {"env_prefix": "REDIS_CONN_"}
