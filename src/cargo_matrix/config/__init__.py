"""Configuration management for cargo-matrix."""

from cargo_matrix.config.config import (
    SettingsManager,
    build_matrix_config,
    get_settings,
    get_settings_manager,
    load_matrix_file,
    reset_settings_manager,
)

__all__ = [
    "SettingsManager",
    "build_matrix_config",
    "get_settings",
    "get_settings_manager",
    "load_matrix_file",
    "reset_settings_manager",
]
