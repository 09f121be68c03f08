"""Configuration models for Docs Catalog."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path.home() / ".docs-catalog" / "config.yaml"


class RepositoryConfig(BaseModel):
    """Coordinates of the GitHub repository holding the documents."""

    owner: str = "nikneem"
    repo: str = "hexmaster-design-guidelines"
    branch: str = "main"
    docs_path: str = "docs"
    index_file: str = "index.json"
    api_base_url: str = "https://api.github.com"
    raw_base_url: str = "https://raw.githubusercontent.com"

    @field_validator("owner", "repo", "branch", "index_file")
    @classmethod
    def validate_not_blank(cls, v):
        """Validate repository coordinates are not empty."""
        if not v or not v.strip():
            raise ValueError("Repository coordinates cannot be empty")
        return v.strip()

    @field_validator("docs_path")
    @classmethod
    def validate_docs_path(cls, v):
        return v.strip().strip("/")

    @field_validator("api_base_url", "raw_base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Validate base URLs use http(s)."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")


class CatalogSettings(BaseSettings):
    """Runtime settings for the catalog, MCP server and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="DOCS_CATALOG_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    # Direct environment variables (without prefix)
    github_token: str | None = Field(default=None, alias="GITHUB_TOKEN")

    # Local collection; when it exists the filesystem catalog is used
    docs_path: Path | None = None

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)

    # Index cache settings
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: float = Field(default=600.0, gt=0)

    request_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"

    server_name: str = "docs-catalog"
    server_version: str = "0.1.0"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is a known logging level name."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def uses_local_docs(self) -> bool:
        return self.docs_path is not None and self.docs_path.is_dir()

    @classmethod
    def load_from_file(cls, config_path: Path | None = None) -> "CatalogSettings":
        """Load settings from a YAML file, falling back to defaults."""
        import yaml

        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f) or {}

            if "repository" in config_data:
                config_data["repository"] = RepositoryConfig.model_validate(
                    config_data["repository"]
                )
            if "docs_path" in config_data and isinstance(config_data["docs_path"], str):
                config_data["docs_path"] = Path(config_data["docs_path"]).expanduser()

            return cls(**config_data)
        except Exception:
            # If config file is invalid, return default config
            return cls()


__all__ = ["CatalogSettings", "RepositoryConfig", "DEFAULT_CONFIG_PATH"]
