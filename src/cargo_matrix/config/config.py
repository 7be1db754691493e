"""Configuration management for cargo-matrix.

Two kinds of configuration live here:

- tool settings (logging, the cargo program), loaded by ``SettingsManager``
  from defaults, an optional YAML file and ``CARGO_MATRIX_*`` environment
  variables;
- per-package matrix configuration, built by ``build_matrix_config`` by
  layering the built-in default channel, an optional workspace file and the
  package's ``[package.metadata.cargo-matrix]`` table.
"""

import os
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from cargo_matrix.core.exceptions import ConfigError
from cargo_matrix.models.config import DEFAULT_CHANNEL, MatrixConfig
from cargo_matrix.models.settings import Settings


class SettingsManager:
    """Manages tool settings with YAML and environment variable support."""

    SETTINGS_FILE_NAME = "settings.yaml"
    ENV_PREFIX = "CARGO_MATRIX_"

    def __init__(self, settings_path: Optional[Path] = None):
        """Initialize settings manager.

        Args:
            settings_path: Optional path to the settings file.
                           If not provided, uses ~/.cargo-matrix/settings.yaml
        """
        self.base_path = Path(
            os.environ.get("CARGO_MATRIX_HOME_DIR", str(Path.home() / ".cargo-matrix"))
        )
        self.settings_path = settings_path or self.base_path / self.SETTINGS_FILE_NAME
        self._settings: Optional[Settings] = None

    def load(self) -> Settings:
        """Load settings from YAML file and environment variables.

        Precedence:
        1. Default values (from Pydantic models)
        2. YAML file values
        3. Environment variables (highest priority)

        Raises:
            ConfigError: If settings are invalid
        """
        if self._settings is not None:
            return self._settings

        settings_dict: dict[str, Any] = {}

        if self.settings_path.exists():
            try:
                settings_dict = self._load_yaml()
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to load settings from {self.settings_path}: {e}") from e
            if not isinstance(settings_dict, dict):
                raise ConfigError(f"Settings file {self.settings_path} must contain a mapping")

        settings_dict = self._apply_environment_variables(settings_dict)

        try:
            self._settings = Settings(**settings_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e

        return self._settings

    def _load_yaml(self) -> Any:
        with self.settings_path.open() as f:
            return yaml.safe_load(f) or {}

    def _apply_environment_variables(self, settings_dict: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variables to settings.

        Examples:
        - CARGO_MATRIX_LOGGING_LEVEL=DEBUG
        - CARGO_MATRIX_LOGGING_FILE=/tmp/cargo-matrix.log
        - CARGO_MATRIX_CARGO=/opt/rust/bin/cargo
        """
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.ENV_PREFIX) or env_key == "CARGO_MATRIX_HOME_DIR":
                continue

            parts = env_key[len(self.ENV_PREFIX):].lower().split("_", 1)
            if len(parts) == 2 and parts[0] == "logging":
                section = settings_dict.setdefault("logging", {})
                if isinstance(section, dict):
                    section[parts[1]] = env_value.upper() if parts[1] == "level" else env_value
            elif parts == ["cargo"]:
                settings_dict["cargo"] = env_value

        return settings_dict

    @property
    def settings(self) -> Settings:
        """Get current settings (load if necessary)."""
        return self.load()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """Get global settings manager instance."""
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


def reset_settings_manager() -> None:
    """Reset settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None


def get_settings() -> Settings:
    """Get current settings."""
    return get_settings_manager().settings


def load_matrix_file(path: Path) -> dict[str, Any]:
    """Load a workspace-wide matrix configuration file (YAML or JSON).

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with Path(path).open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load matrix configuration from {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Matrix configuration {path} must contain a mapping")
    return data


def _normalize_channel(raw: Any, source: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: each channel must be a table, got {type(raw).__name__}")
    channel = {str(key).replace("-", "_"): value for key, value in raw.items()}
    if not isinstance(channel.get("name"), str):
        raise ConfigError(f"{source}: every channel needs a string 'name'")
    return channel


def _merge_layer(merged: dict[str, dict[str, Any]], layer: Any, source: str) -> None:
    if layer is None:
        return
    if not isinstance(layer, dict):
        raise ConfigError(f"{source}: configuration must be a table, got {type(layer).__name__}")

    unknown = set(layer) - {"channel"}
    if unknown:
        raise ConfigError(f"{source}: unknown configuration keys {sorted(unknown)}")

    channels = layer.get("channel", [])
    if isinstance(channels, dict):
        # A single [channel] table instead of [[channel]]
        channels = [channels]
    if not isinstance(channels, list):
        raise ConfigError(f"{source}: 'channel' must be a list of tables")

    for raw in channels:
        channel = _normalize_channel(raw, source)
        merged.setdefault(channel["name"], {}).update(
            {key: value for key, value in channel.items() if value is not None}
        )


def build_matrix_config(*layers: Any, sources: Optional[Iterable[str]] = None) -> MatrixConfig:
    """Build a matrix configuration from raw layers, later layers winning.

    The built-in empty ``default`` channel is always the bottom layer, so the
    result always has a default channel. Channels are merged by name, field by
    field.

    Args:
        layers: Raw mappings of the form ``{"channel": [{"name": ...}, ...]}``
        sources: Optional human-readable names for the layers, for errors

    Raises:
        ConfigError: If a layer is malformed or fails validation
    """
    names = list(sources) if sources is not None else []
    merged: dict[str, dict[str, Any]] = {DEFAULT_CHANNEL: {"name": DEFAULT_CHANNEL}}

    for index, layer in enumerate(layers):
        source = names[index] if index < len(names) else f"layer {index + 1}"
        _merge_layer(merged, layer, source)

    try:
        config = MatrixConfig(channel=list(merged.values()))
    except ValidationError as e:
        raise ConfigError(f"Invalid matrix configuration: {e}") from e

    logger.debug(f"Built matrix configuration with channels {[c.name for c in config.channel]}")
    return config
