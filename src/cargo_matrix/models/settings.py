"""Tool settings models for cargo-matrix."""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Console log level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(
        default=LogLevel.WARNING, description="Logging level for the console"
    )
    file: Optional[str] = Field(default=None, description="Optional log file path")


class Settings(BaseModel):
    """Process-wide settings, resolved once at start and passed down."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cargo: str = Field(
        default_factory=lambda: os.environ.get("CARGO", "cargo"),
        description="Program used to invoke cargo",
    )
