"""Unit tests for Registrar settings."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from registrar.config import DEFAULT_DB_PATH, DEFAULT_LOCK_TIMEOUT, ConfigError, Settings


@pytest.mark.unit
class TestSettings:
    """Tests for Settings construction and validation."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.lock_timeout == DEFAULT_LOCK_TIMEOUT
        assert settings.rules_file is None

    def test_non_positive_lock_timeout_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Settings(lock_timeout=0)

    def test_empty_db_path_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Settings(db_path="")


@pytest.mark.unit
class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    @patch.dict(os.environ, {}, clear=True)
    def test_from_env_defaults(self) -> None:
        settings = Settings.from_env()

        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.lock_timeout == DEFAULT_LOCK_TIMEOUT
        assert settings.rules_file is None

    @patch.dict(
        os.environ,
        {
            "REGISTRAR_DB_PATH": ":memory:",
            "REGISTRAR_LOCK_TIMEOUT": "2.5",
            "REGISTRAR_RULES_FILE": "rules.yaml",
        },
        clear=True,
    )
    def test_from_env_overrides(self) -> None:
        settings = Settings.from_env()

        assert settings.db_path == ":memory:"
        assert settings.lock_timeout == 2.5
        assert settings.rules_file == Path("rules.yaml")

    @patch.dict(os.environ, {"REGISTRAR_LOCK_TIMEOUT": "soon"}, clear=True)
    def test_from_env_invalid_timeout(self) -> None:
        with pytest.raises(ConfigError, match="REGISTRAR_LOCK_TIMEOUT"):
            Settings.from_env()
