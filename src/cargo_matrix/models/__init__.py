"""Data models for cargo-matrix."""

from cargo_matrix.models.config import DEFAULT_CHANNEL, Channel, MatrixConfig
from cargo_matrix.models.feature import Feature, FeatureMatrix, FeatureSet
from cargo_matrix.models.package import (
    METADATA_NAMESPACE,
    Dependency,
    Package,
    WorkspaceMetadata,
)
from cargo_matrix.models.settings import LoggingSettings, LogLevel, Settings

__all__ = [
    "DEFAULT_CHANNEL",
    "Channel",
    "MatrixConfig",
    "Feature",
    "FeatureSet",
    "FeatureMatrix",
    "METADATA_NAMESPACE",
    "Dependency",
    "Package",
    "WorkspaceMetadata",
    "LoggingSettings",
    "LogLevel",
    "Settings",
]
