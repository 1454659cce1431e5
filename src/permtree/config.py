"""
Global Configuration and Safety Defaults.

This module centralizes the defaults of the selection engine and the
loader for the optional project configuration file
(``.permtree/config.yaml``). It protects the tree walkers from runaway
nesting and lets deployments opt out of the lazy-load retry.
"""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

# --- Safety Limits ---
# Menus nested deeper than this are treated as malformed input
MAX_MENU_DEPTH = 64

# --- Locations ---
CONFIG_DIR = ".permtree"
CONFIG_FILE = "config.yaml"

# Environment override for the logging level (wins over the config file)
LOG_LEVEL_ENV = "PERMTREE_LOG_LEVEL"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConfigError(Exception):
    """Raised when the configuration file exists but cannot be used."""


class CascadeSettings(BaseModel):
    """Behaviour of the cascade selector."""
    # Re-invoke the resource loader once when the first load left the menu empty
    retry_empty_load: bool = True


class ResourceSettings(BaseModel):
    """Defaults applied when adapting raw resource records."""
    default_type: Literal["API", "BUTTON"] = "BUTTON"


class LoggingSettings(BaseModel):
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level


class PermtreeConfig(BaseModel):
    """
    Project configuration.

    Every section is optional; a missing file yields the defaults.
    """
    version: str = "1.0"
    cascade: CascadeSettings = Field(default_factory=CascadeSettings)
    resources: ResourceSettings = Field(default_factory=ResourceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "PermtreeConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Explicit config path. Defaults to ``./.permtree/config.yaml``.

        Raises:
            ConfigError: If the file is not valid YAML or has invalid values.
        """
        config_path = path or default_config_path()
        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping at the top level")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    def effective_log_level(self) -> int:
        """Resolve the logging level, honouring the environment override."""
        override = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
        name = override if override in VALID_LOG_LEVELS else self.logging.level
        return getattr(logging, name)


def default_config_path(root: Optional[Path] = None) -> Path:
    """Location of the config file for a project root (cwd by default)."""
    return (root or Path.cwd()) / CONFIG_DIR / CONFIG_FILE
