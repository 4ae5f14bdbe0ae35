"""Configuration management for moni."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from .api_clients.network_error_handler import RetryConfig

logger = logging.getLogger(__name__)

PROJECT_ID_ENV_VAR = "MONI_PROJECT_ID"
CONFIG_DIR_NAME = ".moni"
CONFIG_FILE_NAME = "config.json"


class GoogleCloudConfig(BaseModel):
    """Google Cloud project and Discovery Engine resources."""

    project_id: str = Field(default="", description="Google Cloud project id")
    location: str = Field(
        default="global", description="Discovery Engine location"
    )
    collection: str = Field(
        default="default_collection", description="Discovery Engine collection"
    )
    data_store_id: str = Field(default="", description="Default data store id")
    engine_id: str = Field(default="", description="Search/answer engine (app) id")
    serving_config: str = Field(
        default="default_search", description="Serving config used for search"
    )
    branch: str = Field(
        default="default_branch", description="Data store branch for documents"
    )
    credentials_env_var: str = Field(
        default="GOOGLE_APPLICATION_CREDENTIALS",
        description="Environment variable that must point at the credentials file",
    )
    refresh_threshold_seconds: int = Field(
        default=120, description="Refresh cached tokens this long before expiry"
    )


class GenerativeConfig(BaseModel):
    """Vertex AI generative model settings."""

    region: str = Field(default="us-central1", description="Vertex AI region")
    model: str = Field(
        default="gemini-1.5-flash-002", description="Gemini model name"
    )
    embedding_model: str = Field(
        default="text-embedding-004", description="Text embedding model name"
    )
    temperature: Optional[float] = Field(
        default=None, description="Sampling temperature (model default if unset)"
    )
    max_output_tokens: Optional[int] = Field(
        default=None, description="Upper bound on generated tokens"
    )
    summary_result_count: int = Field(
        default=5, description="Search results summarized by search_documents"
    )
    snippet_count: int = Field(
        default=1, description="Snippets returned per search result"
    )
    page_size: int = Field(default=10, description="Search results per page")


class PollingConfig(BaseModel):
    """Long-running operation polling settings."""

    max_retries: int = Field(default=20, description="Maximum status fetches")
    interval_seconds: float = Field(
        default=5.0, description="Wait between status fetches in seconds"
    )
    deadline_seconds: Optional[float] = Field(
        default=None, description="Overall polling budget in seconds"
    )

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_retries must be >= 1")
        return v

    @field_validator("interval_seconds")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("interval_seconds must be >= 0")
        return v


class TimeoutsConfig(BaseModel):
    """HTTP transport timeouts in seconds."""

    connect: float = Field(default=10.0, description="Connect timeout")
    read: float = Field(default=60.0, description="Read timeout")
    write: float = Field(default=10.0, description="Write timeout")
    pool: float = Field(default=5.0, description="Connection pool timeout")
    max_concurrent_requests: int = Field(
        default=10, description="Requests allowed in flight at once"
    )

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect, read=self.read, write=self.write, pool=self.pool
        )


class RetrySettings(BaseModel):
    """Caller-side retry for transient failures."""

    max_retries: int = Field(default=3, description="Retries after the first try")
    initial_delay: float = Field(default=1.0, description="First backoff delay")
    max_delay: float = Field(default=30.0, description="Backoff delay cap")
    backoff_multiplier: float = Field(default=2.0, description="Backoff growth")
    jitter_enabled: bool = Field(default=True, description="Add up to 10% jitter")

    def to_retry_config(self) -> RetryConfig:
        return RetryConfig(**self.model_dump())


class Config(BaseModel):
    """Main configuration for moni."""

    google_cloud: GoogleCloudConfig = Field(default_factory=GoogleCloudConfig)
    generative: GenerativeConfig = Field(default_factory=GenerativeConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    retry: RetrySettings = Field(default_factory=RetrySettings)


class ConfigManager:
    """Manages configuration loading, saving, and validation."""

    DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / CONFIG_FILE_NAME

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from file or create default, then apply env overrides."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = Config(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
        else:
            self._config = Config()

        project_id = os.environ.get(PROJECT_ID_ENV_VAR)
        if project_id:
            logger.debug(f"Project id taken from {PROJECT_ID_ENV_VAR}")
            self._config.google_cloud.project_id = project_id

        return self._config

    def save(self, config: Optional[Config] = None) -> None:
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(config.model_dump(), f, indent=2)

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load()
        if self._config is None:
            raise RuntimeError("Failed to load configuration")
        return self._config

    def create_default_config(self, **google_cloud: Any) -> Config:
        """Write a default configuration, optionally seeding Google Cloud fields."""
        config = Config(google_cloud=GoogleCloudConfig(**google_cloud))
        self._config = config
        self.save()
        return config

    @staticmethod
    def find_config_path(start_dir: Optional[Path] = None) -> Optional[Path]:
        """Find .moni/config.json by walking up the directory tree.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Path to config.json if found, None otherwise
        """
        current = start_dir or Path.cwd()
        for path in [current] + list(current.parents):
            config_path = path / CONFIG_DIR_NAME / CONFIG_FILE_NAME
            if config_path.exists():
                return config_path
        return None

    @classmethod
    def create_with_backtrack(cls, start_dir: Optional[Path] = None) -> "ConfigManager":
        """Create ConfigManager by finding config through directory backtracking.

        Falls back to ``<start_dir>/.moni/config.json`` when none is found.
        """
        config_path = cls.find_config_path(start_dir)
        if config_path is None:
            start = start_dir or Path.cwd()
            config_path = start / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        return cls(config_path)
