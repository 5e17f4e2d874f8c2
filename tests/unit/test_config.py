"""Unit tests for configuration models."""

import pytest
from pydantic import ValidationError

from actiontree.config import EngineSettings


class TestEngineSettings:
    """Test EngineSettings model."""

    def test_default_settings(self):
        """Test default engine settings."""
        settings = EngineSettings()

        assert settings.log_level == "INFO"
        assert settings.log_format == "json"
        assert settings.execution_timeout is None
        assert settings.cancel_signals == ["SIGINT", "SIGTERM"]

    def test_custom_settings(self):
        """Test custom engine settings."""
        settings = EngineSettings(
            log_level="debug",
            log_format="PLAIN",
            execution_timeout=2.5,
            cancel_signals=["int", "SIGUSR1"],
        )

        assert settings.log_level == "DEBUG"
        assert settings.log_format == "plain"
        assert settings.execution_timeout == 2.5
        assert settings.cancel_signals == ["SIGINT", "SIGUSR1"]

    def test_env_prefix(self, monkeypatch):
        """Test settings are read from ACTIONTREE_ environment variables."""
        monkeypatch.setenv("ACTIONTREE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("actiontree_execution_timeout", "30")
        monkeypatch.setenv("ACTIONTREE_CANCEL_SIGNALS", '["SIGTERM"]')

        settings = EngineSettings()

        assert settings.log_level == "WARNING"
        assert settings.execution_timeout == 30
        assert settings.cancel_signals == ["SIGTERM"]

    def test_timeout_validation(self):
        """Test execution timeout validation."""
        settings = EngineSettings(execution_timeout=600)
        assert settings.execution_timeout == 600

        # Too low
        with pytest.raises(ValidationError):
            EngineSettings(execution_timeout=0)

        # Too high
        with pytest.raises(ValidationError):
            EngineSettings(execution_timeout=100000)

    def test_log_validation(self):
        """Test log level and format validation."""
        with pytest.raises(ValidationError):
            EngineSettings(log_level="VERBOSE")

        with pytest.raises(ValidationError):
            EngineSettings(log_format="xml")

    def test_signal_validation(self):
        """Test unknown signals are rejected."""
        with pytest.raises(ValidationError):
            EngineSettings(cancel_signals=["SIGNOPE"])

    def test_validate_assignment(self):
        """Test assignments are validated."""
        settings = EngineSettings()

        with pytest.raises(ValidationError):
            settings.execution_timeout = -1
