"""Configuration settings and loading."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DOCUMENT_KINDS = ("auto", "single", "domain")


class RegistrySettings(BaseSettings):
    """Configuration for registry builds."""

    model_config = SettingsConfigDict(
        env_prefix="RESOURCE_REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    spec_dir: Path = Path("specs")
    document_kind: str = "auto"
    output_dir: Path = Path("generated")
    schema_dir: Path = Path("generated/schemas")
    scope_overrides: Path | None = None
    display_name_overrides: Path | None = None
    strict_domains: bool = False
    max_workers: int = 1
    verbose: bool = False

    @field_validator("document_kind")
    @classmethod
    def validate_document_kind(cls, v: str) -> str:
        if v not in DOCUMENT_KINDS:
            raise ValueError(f"Invalid document kind: {v}. Valid: {DOCUMENT_KINDS}")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_workers must be at least 1")
        return v


def load_config(config_path: str | Path | None = None) -> RegistrySettings:
    """Load configuration from file and environment.

    Priority: CLI args > env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

    # Init kwargs outrank env vars in BaseSettings; the environment must win over the file.
    prefix = RegistrySettings.model_config["env_prefix"]
    config_data = {
        key: value for key, value in config_data.items() if f"{prefix}{key.upper()}" not in os.environ
    }
    return RegistrySettings(**config_data)
