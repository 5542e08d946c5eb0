"""
Unit tests for ClientSettings loading.
"""

import json

import pytest
from pydantic import ValidationError

from jobflow.models.config import (
    DEFAULT_API_BASE_URL,
    DEVELOPMENT_API_BASE_URL,
    ClientSettings,
    QueryDefaults,
)

ENV_VARS = (
    "JOBFLOW_API_URL",
    "JOBFLOW_ENV",
    "JOBFLOW_DATA_DIR",
    "JOBFLOW_STORAGE_PATH",
    "JOBFLOW_LOG_LEVEL",
    "JOBFLOW_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No JOBFLOW_* variables and no .env file from the developer's machine."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestClientSettingsLoad:
    """Test cases for ClientSettings.load."""

    def test_defaults_without_file_or_env(self):
        """No config file and no env -> hosted backend and standard limits."""
        # Act
        settings = ClientSettings.load()

        # Assert
        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.query.stale_time == 300
        assert settings.query.max_retries == 2
        assert settings.timeouts.job_discovery == 30
        assert settings.uploads.max_size_bytes == 5 * 1024 * 1024

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """JOBFLOW_API_URL wins over the file's api_base_url."""
        # Arrange
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"api_base_url": "https://file.example"}))
        monkeypatch.setenv("JOBFLOW_API_URL", "https://env.example/")

        # Act
        settings = ClientSettings.load(config)

        # Assert
        assert settings.api_base_url == "https://env.example"

    def test_development_uses_local_proxy(self, monkeypatch):
        """Development mode defaults to the local proxy URL."""
        # Arrange
        monkeypatch.setenv("JOBFLOW_ENV", "development")

        # Act
        settings = ClientSettings.load()

        # Assert
        assert settings.is_development
        assert settings.api_base_url == DEVELOPMENT_API_BASE_URL

    def test_development_keeps_explicit_url(self, monkeypatch):
        """An explicit URL is kept in development mode."""
        # Arrange
        monkeypatch.setenv("JOBFLOW_ENV", "development")
        monkeypatch.setenv("JOBFLOW_API_URL", "https://staging.example")

        # Act
        settings = ClientSettings.load()

        # Assert
        assert settings.api_base_url == "https://staging.example"

    def test_missing_explicit_file_raises(self, tmp_path):
        """An explicitly named config file must exist."""
        # Act & Assert
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            ClientSettings.load(tmp_path / "missing.json")

    def test_storage_path_override(self, tmp_path, monkeypatch):
        """JOBFLOW_STORAGE_PATH relocates the local store."""
        # Arrange
        monkeypatch.setenv("JOBFLOW_STORAGE_PATH", str(tmp_path / "custom.json"))

        # Act
        settings = ClientSettings.load()

        # Assert
        assert settings.local_storage_path == tmp_path / "custom.json"


class TestClientSettingsValidation:
    """Test cases for field validation."""

    def test_rejects_relative_base_url(self):
        with pytest.raises(ValidationError):
            ClientSettings(api_base_url="api.example.com")

    def test_rejects_unknown_environment(self):
        with pytest.raises(ValidationError):
            ClientSettings(environment="staging")

    def test_rejects_unknown_401_behavior(self):
        with pytest.raises(ValidationError):
            QueryDefaults(on_401="ignore")

    def test_log_level_normalized(self):
        assert ClientSettings(log_level="debug").log_level == "DEBUG"
