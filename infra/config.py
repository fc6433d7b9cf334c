"""
Configuration
-------------
YAML configuration with environment variable overrides.

Lookup order for a key such as 'router.max_age_hours':
1. Environment variable RL4_ROUTER_MAX_AGE_HOURS
2. The value in the YAML file
3. The caller's default
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import os

import yaml

from core.errors import ConfigError

ENV_PREFIX = "RL4_"


class ConfigManager:
    """
    Centralized configuration management.
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(
        self,
        config_path: Union[str, Path, None] = "config.yaml",
        logger: Optional[logging.Logger] = None,
    ):
        self._config_path = Path(config_path) if config_path else None
        self._config: Dict[str, Any] = {}
        self._logger = logger or logging.getLogger("rl4.infra.config")

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        if self._config_path is None:
            self._config = {}
            return

        if not self._config_path.exists():
            self._config = {}
            self._logger.debug(f"Config file not found: {self._config_path}")
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self._config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {self._config_path}")

        self._config = data
        self._logger.info(f"Loaded config from {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_key = f"{ENV_PREFIX}{key.upper().replace('.', '_')}"
        env_value = os.getenv(env_key)
        if env_value is not None:
            return env_value

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only, not persisted)."""
        parts = key.split(".")
        config = self._config

        for part in parts[:-1]:
            if not isinstance(config.get(part), dict):
                config[part] = {}
            config = config[part]

        config[parts[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section."""
        value = self._config.get(section, {})
        return value if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()


@dataclass
class RouterConfig:
    """Settings for the command router, the scanner and the validators."""
    registry_path: str = ".reasoning/commands.json"
    source_dir: str = "extension"
    rl4_dir: str = ".reasoning_rl4"
    max_age_hours: float = 24.0
    scan_timeout_seconds: Optional[float] = None  # None = wait indefinitely
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_manager(cls, manager: ConfigManager) -> "RouterConfig":
        """Build a RouterConfig from the 'router' and 'logging' sections."""
        defaults = cls()
        return cls(
            registry_path=_as_str(manager.get("router.registry_path", defaults.registry_path)),
            source_dir=_as_str(manager.get("router.source_dir", defaults.source_dir)),
            rl4_dir=_as_str(manager.get("router.rl4_dir", defaults.rl4_dir)),
            max_age_hours=_as_float(
                "router.max_age_hours",
                manager.get("router.max_age_hours", defaults.max_age_hours),
            ),
            scan_timeout_seconds=_as_optional_float(
                "router.scan_timeout_seconds",
                manager.get("router.scan_timeout_seconds", defaults.scan_timeout_seconds),
            ),
            log_level=_as_str(manager.get("logging.level", defaults.log_level)).upper(),
            log_dir=_as_optional_str(manager.get("logging.dir", defaults.log_dir)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(config_path: Union[str, Path, None] = "config.yaml") -> RouterConfig:
    """Load a RouterConfig from a YAML file plus environment overrides."""
    return RouterConfig.from_manager(ConfigManager(config_path))


def _as_str(value: Any) -> str:
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if result <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return result


def _as_optional_float(key: str, value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "null")):
        return None
    return _as_float(key, value)
