"""
Configuration loading and validation for covmark.

Settings come from a YAML file, a plain dictionary, or ``COVMARK_*``
environment variables. The active configuration is process-wide.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_ENABLED = "COVMARK_ENABLED"
ENV_SHARED = "COVMARK_SHARED"
ENV_LOG_LEVEL = "COVMARK_LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class CovMarkConfig(BaseModel):
    """Process-wide covmark settings.

    Example:
        >>> config = CovMarkConfig(enabled=True, log_level="debug")
        >>> config.log_level
        'DEBUG'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = Field(
        default=True,
        description="Master switch; when off, hits are no-ops and checks never assert",
    )
    shared_by_default: bool = Field(
        default=False,
        description="Count hits from every thread for checks that do not choose a mode",
    )
    log_level: str = Field(
        default="WARNING",
        description="Level applied to the 'covmark' logger",
    )

    @field_validator("log_level")
    @classmethod
    def log_level_is_known(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}. Available: {', '.join(_LOG_LEVELS)}")
        return level

    def to_yaml(self) -> str:
        """Serialize to YAML under a top-level ``covmark`` key."""
        result: str = yaml.dump(
            {"covmark": self.model_dump(mode="json")},
            default_flow_style=False,
            sort_keys=False,
        )
        return result


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = f"Invalid boolean for {name}: {raw!r}"
    raise ValueError(msg)


class ConfigLoader:
    """Load and validate covmark configuration."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CovMarkConfig:
        """
        Create configuration from a dictionary.

        A top-level ``covmark`` key is unwrapped when present.

        Args:
            data: Configuration dictionary

        Returns:
            CovMarkConfig from dictionary
        """
        if "covmark" in data and isinstance(data["covmark"], Mapping):
            data = data["covmark"]
        return CovMarkConfig.model_validate(dict(data))

    @classmethod
    def from_yaml(cls, path: str | Path) -> CovMarkConfig:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            CovMarkConfig loaded from file
        """
        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CovMarkConfig:
        """
        Load configuration from ``COVMARK_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            CovMarkConfig with unset variables left at their defaults
        """
        if environ is None:
            environ = os.environ

        data: dict[str, Any] = {}
        if ENV_ENABLED in environ:
            data["enabled"] = _parse_bool(ENV_ENABLED, environ[ENV_ENABLED])
        if ENV_SHARED in environ:
            data["shared_by_default"] = _parse_bool(ENV_SHARED, environ[ENV_SHARED])
        if ENV_LOG_LEVEL in environ:
            data["log_level"] = environ[ENV_LOG_LEVEL]
        return CovMarkConfig.model_validate(data)

    @classmethod
    def generate_sample_config(cls) -> str:
        """
        Generate a sample YAML configuration file.

        Returns:
            YAML string for sample configuration
        """
        return CovMarkConfig().to_yaml()


_active: CovMarkConfig | None = None


def get_config() -> CovMarkConfig:
    """Return the active configuration, loading it from the environment on first use."""
    config = _active
    if config is None:
        config = configure(ConfigLoader.from_env())
    return config


def configure(config: CovMarkConfig) -> CovMarkConfig:
    """Install ``config`` as the active configuration.

    The ``covmark`` logger level is only changed when ``log_level`` was set
    explicitly, so a level chosen by the application is left alone.
    """
    global _active
    _active = config
    if "log_level" in config.model_fields_set:
        logging.getLogger("covmark").setLevel(config.log_level)
    return config


def reset_config() -> None:
    """Drop the active configuration so the next lookup re-reads the environment."""
    global _active
    _active = None
