"""
Configuration management for the Video Intelligence System.

Provides centralized configuration using Pydantic for validation and
environment variable support. Supports video_intel.yaml for per-project
settings.
"""

from pathlib import Path
from typing import Any, Dict, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


CONFIG_FILENAME = "video_intel.yaml"


def load_video_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a video record from a YAML (or JSON) file.

    Args:
        path: Path to the file

    Returns:
        Dictionary with the file contents, or empty dict for an empty file
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a mapping")
    return data


class Config(BaseSettings):
    """
    Language service configuration with environment variable support.

    Configuration can be provided via:
    1. Constructor keyword arguments
    2. Environment variables (prefixed with LANGUAGE_AI_)
    3. .env file
    4. video_intel.yaml in the working directory
    5. Default values

    The endpoint, API key, project and deployment have no defaults;
    constructing a Config without them raises a ValidationError.

    Example:
        export LANGUAGE_AI_ENDPOINT="https://my-lang.cognitiveservices.azure.com"
        export LANGUAGE_AI_API_KEY="..."
        export LANGUAGE_AI_PROJECT_NAME="video-keywords"
        export LANGUAGE_AI_DEPLOYMENT_NAME="production"
    """

    model_config = SettingsConfigDict(
        env_prefix="LANGUAGE_AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        yaml_file=CONFIG_FILENAME,
    )

    # Service connection
    endpoint: str = Field(
        description="Language service endpoint URL"
    )
    api_key: str = Field(
        min_length=1,
        description="Subscription key for the language service"
    )

    # Custom entity recognition model
    project_name: str = Field(
        min_length=1,
        description="Custom NER project name"
    )
    deployment_name: str = Field(
        min_length=1,
        description="Deployment of the custom NER project"
    )

    # Analysis settings
    language: str = Field(
        default="en",
        description="Language code attached to submitted documents"
    )
    confidence_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Minimum confidence for an entity to enter the summary"
    )

    # Transport settings
    api_version: str = Field(
        default="2022-05-01",
        description="analyze-text API version"
    )
    polling_interval: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds between job status polls when no Retry-After is sent"
    )
    request_timeout: float = Field(
        default=15.0,
        gt=0.0,
        description="Per-request HTTP timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries for throttled (429), 408 and 5xx responses and transport errors"
    )
    retry_backoff: float = Field(
        default=0.8,
        ge=0.0,
        description="Base retry delay in seconds, doubled per attempt; Retry-After wins when sent"
    )

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return v.rstrip("/")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def masked(self) -> Dict[str, Any]:
        """Return settings as a dict with the API key hidden."""
        data = self.model_dump()
        key = data.get("api_key") or ""
        data["api_key"] = f"{key[:4]}***" if len(key) > 4 else "***"
        return data


def get_config(**overrides: Any) -> Config:
    """
    Get the application configuration instance.

    Merges settings from keyword overrides, environment variables,
    .env file, and video_intel.yaml (if present).

    Returns:
        Config: Application configuration

    Raises:
        pydantic.ValidationError: If required values are missing or invalid
    """
    return Config(**overrides)
