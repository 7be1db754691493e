"""Orchestration: metadata, configuration, matrices, chunking and execution."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger
from rich.console import Console

from cargo_matrix.config import build_matrix_config, load_matrix_file
from cargo_matrix.core.exceptions import ChunkArgumentError, ConfigError, PackageNotFoundError
from cargo_matrix.matrix import generate, select_chunk, validate_chunk_args
from cargo_matrix.models.config import DEFAULT_CHANNEL
from cargo_matrix.models.feature import FeatureMatrix
from cargo_matrix.models.package import METADATA_NAMESPACE, Package, WorkspaceMetadata
from cargo_matrix.models.settings import Settings
from cargo_matrix.runtime.execute import Runner, Task, TaskKind, TaskResult
from cargo_matrix.runtime.metadata import read_metadata

MetadataReader = Callable[[str, Optional[Path]], WorkspaceMetadata]


@dataclass
class RunOptions:
    """Options shared by every cargo-matrix command."""

    channel: str = DEFAULT_CHANNEL
    dry_run: bool = False
    manifest_path: Optional[Path] = None
    package: Optional[str] = None
    chunks: Optional[int] = None
    chunk: Optional[int] = None
    config_path: Optional[Path] = None
    args: list[str] = field(default_factory=list)

    def validate(self) -> None:
        """Reject inconsistent chunk options before any work is done.

        Raises:
            ChunkArgumentError: If only one chunk option is set or they are out of range
        """
        if self.chunks is None and self.chunk is None:
            return
        if self.chunks is None or self.chunk is None:
            raise ChunkArgumentError("--chunks and --chunk must be given together")
        validate_chunk_args(self.chunks, self.chunk)


@dataclass
class PackageMatrix:
    package: str
    matrix: FeatureMatrix


def package_matrix(package: Package, channel: str, workspace_layer: Optional[dict[str, Any]] = None) -> FeatureMatrix:
    """Build the configuration for ``package`` and generate its matrix.

    Raises:
        ConfigError: If the package's configuration is invalid
    """
    config = build_matrix_config(
        workspace_layer,
        package.matrix_config,
        sources=["workspace configuration", f"{package.name} [package.metadata.{METADATA_NAMESPACE}]"],
    )
    return generate(package, config, channel)


def collect_matrices(
    metadata: WorkspaceMetadata,
    options: RunOptions,
    workspace_layer: Optional[dict[str, Any]] = None,
) -> list[PackageMatrix]:
    """Compute the matrix of every selected workspace member.

    Packages whose configuration is invalid are skipped with a warning,
    unless the package was requested explicitly.

    Raises:
        PackageNotFoundError: If ``options.package`` names no workspace member
        ConfigError: If the explicitly requested package has invalid configuration
    """
    members = metadata.members()
    if options.package is not None:
        members = [package for package in members if package.name == options.package]
        if not members:
            raise PackageNotFoundError(f"package '{options.package}' is not a workspace member")

    matrices: list[PackageMatrix] = []
    for package in members:
        try:
            matrix = package_matrix(package, options.channel, workspace_layer)
        except ConfigError as e:
            if options.package is not None:
                raise
            logger.warning(f"Skipping package '{package.name}': {e}")
            continue
        matrices.append(PackageMatrix(package.name, matrix))

    return matrices


def select_work(matrices: list[PackageMatrix], options: RunOptions) -> list[PackageMatrix]:
    """Apply chunk selection, unless a single package was requested."""
    if options.package is not None:
        if options.chunks is not None:
            logger.info("--package given, ignoring chunk selection")
        return matrices
    if options.chunks is None or options.chunk is None:
        return matrices
    return select_chunk(matrices, options.chunks, options.chunk)


def plan(
    options: RunOptions,
    settings: Settings,
    metadata_reader: Optional[MetadataReader] = None,
) -> list[PackageMatrix]:
    """Validate options, read metadata and return the package matrices to run.

    Raises:
        ChunkArgumentError: On invalid chunk options
        ConfigError: If the workspace configuration file is invalid
        MetadataError: If workspace metadata cannot be read
        PackageNotFoundError: If the requested package does not exist
    """
    options.validate()

    workspace_layer = load_matrix_file(options.config_path) if options.config_path else None
    metadata_reader = metadata_reader or read_metadata
    metadata = metadata_reader(settings.cargo, options.manifest_path)

    logger.info(f"Using channel '{options.channel}'")
    return select_work(collect_matrices(metadata, options, workspace_layer), options)


def execute(
    kind: TaskKind,
    work: list[PackageMatrix],
    options: RunOptions,
    settings: Settings,
    runner: Optional[Runner] = None,
    console: Optional[Console] = None,
) -> list[TaskResult]:
    """Run ``kind`` over every package matrix in order, stopping at the first failure.

    Raises:
        SpawnError: If cargo cannot be launched
        TaskFailure: On the first failing feature set
    """
    results: list[TaskResult] = []
    for item in work:
        task = Task(
            kind=kind,
            package=item.package,
            matrix=item.matrix,
            cargo=settings.cargo,
            manifest_path=options.manifest_path,
            args=list(options.args),
            dry_run=options.dry_run,
        )
        results.extend(task.execute(runner=runner, console=console))
    return results


def matrix_document(work: list[PackageMatrix]) -> dict[str, Any]:
    """CI matrix document with one entry per (package, feature set)."""
    return {
        "include": [
            {"package": item.package, "features": str(feature_set)}
            for item in work
            for feature_set in item.matrix
        ]
    }
