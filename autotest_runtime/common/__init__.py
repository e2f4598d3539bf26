"""
================================================================================
Autotest Runtime Common Utilities
================================================================================

Shared configuration management and logging setup for the runtime support
layer.

Exports:
    - RuntimeConfig: Singleton configuration manager
    - get_config / set_config: Dot-notation access to configuration values
    - init_logger: Initialize loguru with standard settings

Usage:
    from autotest_runtime.common import get_config, init_logger

    init_logger()
    delay = get_config("retry.default.delay", 1.0)

================================================================================
"""

import os
import sys
from typing import Any, Dict, Optional
import yaml
from loguru import logger

# ============================================================
# Configuration Management
# ============================================================

CONFIG_FILE_ENV = "AUTOTEST_RUNTIME_CONFIG"


class RuntimeConfig:
    """
    Singleton class to manage runtime configuration.

    Loads settings from a YAML file and environment variables.
    Environment variables take precedence over file-based configuration.
    """
    _instance: Optional["RuntimeConfig"] = None
    _config: Dict[str, Any] = {}
    _initialized: bool = False

    def __new__(cls) -> "RuntimeConfig":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._config = {}
        self._load_configs()
        self._initialized = True

    def _load_configs(self) -> None:
        """
        Loads configurations from YAML files and environment variables.
        """
        config_paths = [
            os.environ.get(CONFIG_FILE_ENV, ""),
            "config/runtime.yaml",
            os.path.join(os.path.dirname(__file__), "..", "config", "runtime.yaml"),
        ]

        for config_path in config_paths:
            if config_path and os.path.exists(config_path):
                try:
                    with open(config_path, "r", encoding="utf-8") as f:
                        file_config = yaml.safe_load(f) or {}
                        self._config.update(file_config)
                    logger.debug(f"Loaded configuration from {config_path}")
                    break
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Failed to load config from {config_path}: {e}")

        # Override with environment variables
        env_mapping = {
            "LOG_LEVEL": "logging.level",
            "LOG_FILE": "logging.file",
            "RETRY_MAX_ATTEMPTS": "retry.default.max_attempts",
            "RETRY_TIMEOUT": "retry.default.timeout",
            "RETRY_DELAY": "retry.default.delay",
        }

        for env_key, config_key in env_mapping.items():
            if env_key in os.environ:
                self._set_nested(config_key, os.environ[env_key])

    def _set_nested(self, key: str, value: Any) -> None:
        """
        Sets a nested configuration value using dot notation.
        """
        keys = key.split(".")
        current = self._config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieves a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "retry.default.delay")
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        self._set_nested(key, value)

    def get_all(self) -> Dict[str, Any]:
        """
        Returns the entire configuration dictionary.
        """
        return self._config.copy()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access reloads configuration."""
        cls._instance = None
        cls._config = {}
        cls._initialized = False


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get a configuration value.

    Example:
        level = get_config("logging.level", "INFO")
    """
    return RuntimeConfig().get(key, default)


def set_config(key: str, value: Any) -> None:
    """
    Convenience function to set a configuration value.
    """
    RuntimeConfig().set(key, value)


# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: str = None,
    format_string: str = None,
    log_file: str = None
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to.

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="logs/runtime.log")
    """
    global _logger_initialized

    if _logger_initialized:
        return

    # Remove default handler
    logger.remove()

    level = (level or get_config("logging.level", "INFO")).upper()
    format_string = format_string or get_config(
        "logging.format",
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    log_file = log_file or get_config("logging.file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {level}")


# Export public API
__all__ = [
    "CONFIG_FILE_ENV",
    "RuntimeConfig",
    "get_config",
    "set_config",
    "init_logger",
]
