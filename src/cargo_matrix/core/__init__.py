"""Core building blocks shared by every cargo-matrix layer."""

from cargo_matrix.core.exceptions import (
    ChunkArgumentError,
    ConfigError,
    MatrixError,
    MetadataError,
    MissingDefaultChannelError,
    PackageNotFoundError,
    SpawnError,
    TaskFailure,
)

__all__ = [
    "MatrixError",
    "ConfigError",
    "MissingDefaultChannelError",
    "ChunkArgumentError",
    "MetadataError",
    "PackageNotFoundError",
    "SpawnError",
    "TaskFailure",
]
