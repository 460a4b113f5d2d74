"""Models for events shipped to the remote log collector."""

from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Severity levels understood by the collector."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class LogEvent(BaseModel):
    """Structured log event, posted as-is to the collector."""

    stack: str
    level: LogLevel
    package: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
