"""Configuration management with Pydantic models."""

from .settings import EngineSettings

__all__ = ["EngineSettings"]
