"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Hierarchical YAML configuration loading
    - Environment variable override (TIMEOUTS_REMOTE_SETTLE overrides timeouts.remote_settle)
    - Dot notation path access
    - Built-in defaults for every harness tunable

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from ..errors import ConfigurationError


# Default configuration file path (repo-level config/config.yaml)
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

# Values used when neither the YAML file nor the environment provide one.
DEFAULTS: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
    },
    "timeouts": {
        # seconds
        "remote_settle": 5.0,
        "remote_poll_interval": 0.1,
        "remote_probe": 0.1,
        "remote_read": 1.0,
        "remote_lookup": 5.0,
        "workflow_step": 30.0,
    },
    "visual": {
        "snapshot_dir": "__screenshots__",
    },
    "performance": {
        "render_time_threshold_ms": 100.0,
        "render_time_poor_ms": 1000.0,
        "memory_threshold_bytes": 1_000_000,
        "memory_poor_bytes": 10_000_000,
        "low_score_threshold": 70,
        "settle_delay": 0.1,
    },
    "leak": {
        "memory_growth_per_snapshot_bytes": 100_000,
        "memory_growth_per_snapshot_weight": 40,
        "element_growth_per_snapshot": 10,
        "element_growth_per_snapshot_weight": 30,
        "total_memory_growth_bytes": 1_000_000,
        "total_memory_growth_weight": 30,
        "has_leak_above": 50,
    },
    "accessibility": {
        "issue_penalty": 10,
    },
}


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (TIMEOUTS_WORKFLOW_STEP)
        2. YAML configuration file
        3. Built-in DEFAULTS
        4. Caller-supplied default

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("timeouts.workflow_step")
        30.0
        >>> config.get("leak.has_leak_above", 50)
        50
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file on top of the built-in defaults."""
        self._config = copy.deepcopy(DEFAULTS)

        if not self._config_path.exists():
            logger.debug(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Top-level YAML must be a mapping: {self._config_path}"
            )

        self._config = _deep_merge(self._config, file_config)
        logger.debug(f"Loaded configuration from: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "performance.settle_delay")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                break

        reference = value if value is not None else default

        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, reference)

        return reference

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "leak", "timeouts")

        Returns:
            Section dictionary or empty dict if not found
        """
        return dict(self._config.get(section, {}))

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_config(key: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using a dot-separated key path.

    Examples:
        >>> get_config("timeouts.remote_settle", 5.0)
        5.0
    """
    return ConfigLoader().get(key, default)


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULTS",
    "get_config",
]
