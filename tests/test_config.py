"""Tests for WatchSettings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from workflowsync.config import WatchSettings


class TestWatchSettings:
    """Tests for settings defaults and validation."""

    def test_defaults(self):
        """Defaults match the compose setup."""
        settings = WatchSettings()

        assert settings.workflows_dir == Path("n8n/backup/workflows")
        assert settings.suffix == ".json"
        assert settings.container == "n8n-import"
        assert settings.db_service == "postgres"
        assert settings.poll_interval == 2.0
        assert settings.ready_timeout == 5.0
        assert settings.wait_timeout == 30.0
        assert settings.wait_interval == 0.5
        assert settings.force_polling is False

    @pytest.mark.parametrize("field", ["poll_interval", "ready_timeout", "wait_timeout", "wait_interval"])
    def test_rejects_non_positive_timing(self, field: str):
        """Timing values must be positive."""
        with pytest.raises(ValidationError):
            WatchSettings(**{field: 0})

    def test_rejects_blank_container(self):
        """Container name must not be blank."""
        with pytest.raises(ValidationError):
            WatchSettings(container="  ")

    def test_suffix_needs_dot(self):
        """Suffix must look like an extension."""
        with pytest.raises(ValidationError):
            WatchSettings(suffix="json")

    def test_frozen(self):
        """Settings are immutable once built."""
        settings = WatchSettings()
        with pytest.raises(ValidationError):
            settings.container = "other"
