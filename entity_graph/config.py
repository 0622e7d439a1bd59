"""YAML configuration for entity-graph.

Settings are flat dotted keys (``redis.url``) stored in
``.entity-graph/config.yaml`` under the working directory (local scope) or the
home directory (global scope). Reads fall through local, then global, then the
built-in defaults.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".entity-graph"
CONFIG_FILE_NAME = "config.yaml"

DEFAULTS: dict[str, Any] = {
    "backend": "redis",
    "redis.url": "redis://localhost:6379/0",
    "redis.prefix": "entity_graph",
    "traversal.max_depth": 5,
}


def global_config_dir() -> Path:
    return Path.home() / CONFIG_DIR_NAME


def _read(config_file: Path) -> dict[str, Any]:
    """Settings stored in ``config_file``; an absent file holds none."""
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r") as f:
            settings = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config", config_file=str(config_file), error=str(e))
        raise ValueError(f"Failed to load config from {config_file}: {e}") from e

    if not isinstance(settings, dict):
        raise ValueError(f"Config file {config_file} must hold a mapping of keys to values")
    return settings


class Config:
    """One writable scope of settings plus the read-only scopes behind it.

    Args:
        use_global: Write to the global scope instead of the local one.
        config_dir: Directory holding the writable config file, overriding the
            scope's usual location.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        self.is_global = use_global
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif use_global:
            self.config_dir = global_config_dir()
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
        self.config_file = self.config_dir / CONFIG_FILE_NAME

        self._settings = _read(self.config_file)
        self._fallback: dict[str, Any] = {}
        if not self.is_global:
            global_file = global_config_dir() / CONFIG_FILE_NAME
            if global_file != self.config_file:
                try:
                    self._fallback = _read(global_file)
                except ValueError as e:
                    logger.warning("Ignoring unreadable global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _save(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._settings, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error("Failed to save config", config_file=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved", config_file=str(self.config_file))

    def get(self, key: str, default: Any = None) -> Any:
        """Effective value of ``key``, or ``default`` when no scope sets it."""
        for scope, settings in (("local", self._settings), ("global", self._fallback), ("default", DEFAULTS)):
            if key in settings:
                logger.debug("Config value resolved", key=key, scope=scope)
                return settings[key]
        return default

    def get_int(self, key: str) -> int:
        value = self.get(key)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Config value {key} must be an integer, got {value!r}") from e

    def set(self, key: str, value: str) -> None:
        logger.debug("Setting config value", key=key)
        self._settings[key] = value
        self._save()

    def unset(self, key: str) -> None:
        if self._settings.pop(key, None) is not None:
            logger.debug("Unset config value", key=key)
            self._save()

    def list(self) -> dict[str, Any]:
        """Explicitly configured settings, with this scope overriding the global one."""
        return {**self._fallback, **self._settings}


def get_config(use_global: bool = False) -> Config:
    return Config(use_global=use_global)
