"""Configuration models using Pydantic."""

import signal
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Global engine configuration settings."""

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log format (json, plain)"
    )

    # Execution configuration
    execution_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        le=86400,
        description="Deadline for a whole execution in seconds (None for no deadline)"
    )
    cancel_signals: List[str] = Field(
        default_factory=lambda: ["SIGINT", "SIGTERM"],
        description="Signals that cancel a running execution"
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in ("json", "plain"):
            raise ValueError(f"Unknown log format: {value}")
        return fmt

    @field_validator("cancel_signals")
    @classmethod
    def _validate_cancel_signals(cls, value: List[str]) -> List[str]:
        names = []
        for name in value:
            name = name.upper()
            if not name.startswith("SIG"):
                name = f"SIG{name}"
            if name not in signal.Signals.__members__:
                raise ValueError(f"Unknown signal: {name}")
            names.append(name)
        return names

    class Config:
        """Pydantic configuration."""
        env_prefix = "ACTIONTREE_"
        case_sensitive = False
        validate_assignment = True
