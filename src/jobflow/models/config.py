"""
Configuration Models

Pydantic models for client configuration validation.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_API_BASE_URL = "https://jobhunter-backend-v2-1020050031271.us-central1.run.app"
DEVELOPMENT_API_BASE_URL = "http://localhost:5000"
DEFAULT_CONFIG_PATH = Path("config/client_settings.json")
DEFAULT_DATA_DIR = Path.home() / ".jobflow"

ALLOWED_UPLOAD_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


class Timeouts(BaseModel):
    """Timeout configuration in seconds."""

    request: float = Field(default=30.0, gt=0)
    job_discovery: float = Field(default=30.0, gt=0)
    upload: float = Field(default=120.0, gt=0)


class QueryDefaults(BaseModel):
    """Request cache defaults."""

    stale_time: float = Field(default=300.0, ge=0, description="Freshness window in seconds")
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0)
    retry_max_delay: float = Field(default=30.0, ge=0)
    on_401: str = Field(default="throw")

    @field_validator("on_401")
    @classmethod
    def validate_on_401(cls, v: str) -> str:
        """Only the two supported unauthorized behaviors are accepted."""
        if v not in ("throw", "return_null"):
            raise ValueError("on_401 must be 'throw' or 'return_null'")
        return v


class UploadLimits(BaseModel):
    """CV upload limits."""

    max_size_mb: float = Field(default=5.0, gt=0)
    allowed_types: list[str] = Field(default_factory=lambda: list(ALLOWED_UPLOAD_TYPES))

    @property
    def max_size_bytes(self) -> int:
        return int(self.max_size_mb * 1024 * 1024)


class ClientSettings(BaseModel):
    """Client configuration model."""

    api_base_url: str = Field(default=DEFAULT_API_BASE_URL)
    environment: str = Field(default="production")
    data_dir: Path = Field(default=DEFAULT_DATA_DIR)
    storage_path: Optional[Path] = None
    timeouts: Timeouts = Field(default_factory=Timeouts)
    query: QueryDefaults = Field(default_factory=QueryDefaults)
    uploads: UploadLimits = Field(default_factory=UploadLimits)
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/jobflow.log")

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Base URL must be absolute; trailing slashes are dropped."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment name."""
        v = v.lower()
        if v not in ("production", "development"):
            raise ValueError("environment must be 'production' or 'development'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def local_storage_path(self) -> Path:
        return self.storage_path or self.data_dir / "local_storage.json"

    @property
    def extension_outbox_path(self) -> Path:
        return self.data_dir / "extension_outbox.jsonl"

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "ClientSettings":
        """Load client settings from config file and environment.

        The JSON file is optional when no path is given. Environment variables
        (also read from a .env file) override file values.

        Args:
            config_path: Path to client_settings.json (defaults to config/client_settings.json)

        Returns:
            ClientSettings: Validated configuration

        Raises:
            FileNotFoundError: If an explicitly given config file doesn't exist
            ValueError: If config validation fails
        """
        load_dotenv()

        config_data: dict[str, Any] = {}
        if config_path is None:
            path = DEFAULT_CONFIG_PATH
            explicit = False
        else:
            path = Path(config_path)
            explicit = True

        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
        elif explicit:
            raise FileNotFoundError(
                f"Config file not found: {path}. "
                f"Copy {path.stem}.example.json to {path.name}"
            )

        config_data.update(_env_overrides())

        # Development builds talk to the local proxy unless a URL was given
        if (
            str(config_data.get("environment", "")).lower() == "development"
            and "api_base_url" not in config_data
        ):
            config_data["api_base_url"] = DEVELOPMENT_API_BASE_URL

        return cls(**config_data)


def _env_overrides() -> dict[str, Any]:
    env_map = {
        "JOBFLOW_API_URL": "api_base_url",
        "JOBFLOW_ENV": "environment",
        "JOBFLOW_DATA_DIR": "data_dir",
        "JOBFLOW_STORAGE_PATH": "storage_path",
        "JOBFLOW_LOG_LEVEL": "log_level",
        "JOBFLOW_LOG_FILE": "log_file",
    }
    overrides: dict[str, Any] = {}
    for env_key, field_name in env_map.items():
        value = os.getenv(env_key)
        if value:
            overrides[field_name] = value
    return overrides
