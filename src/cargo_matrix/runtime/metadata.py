"""Reading workspace metadata from ``cargo metadata``."""

import subprocess
from pathlib import Path
from typing import Callable, Optional

from loguru import logger
from pydantic import ValidationError

from cargo_matrix.core.exceptions import MetadataError
from cargo_matrix.models.package import WorkspaceMetadata

Runner = Callable[..., subprocess.CompletedProcess]


def metadata_command(cargo: str, manifest_path: Optional[Path] = None) -> list[str]:
    cmd = [cargo, "metadata", "--format-version", "1", "--no-deps"]
    if manifest_path is not None:
        cmd.extend(["--manifest-path", str(manifest_path)])
    return cmd


def parse_metadata(text: str) -> WorkspaceMetadata:
    """Parse the JSON printed by ``cargo metadata --format-version 1``.

    Raises:
        MetadataError: If the document is not valid metadata
    """
    try:
        return WorkspaceMetadata.model_validate_json(text)
    except ValidationError as e:
        raise MetadataError(f"Could not parse cargo metadata: {e}") from e


def read_metadata(
    cargo: str = "cargo",
    manifest_path: Optional[Path] = None,
    runner: Runner = subprocess.run,
) -> WorkspaceMetadata:
    """Run ``cargo metadata`` and return the parsed workspace.

    Args:
        cargo: Program used to invoke cargo
        manifest_path: Optional Cargo.toml to read instead of the current workspace
        runner: Callable with the ``subprocess.run`` signature

    Raises:
        MetadataError: If cargo cannot be run, fails, or prints invalid output
    """
    cmd = metadata_command(cargo, manifest_path)
    logger.debug(f"Reading workspace metadata: {' '.join(cmd)}")

    try:
        result = runner(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        raise MetadataError(f"Failed to run '{cargo} metadata': {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise MetadataError(
            f"'{cargo} metadata' exited with code {result.returncode}" + (f": {stderr}" if stderr else "")
        )

    metadata = parse_metadata(result.stdout)
    logger.debug(f"Workspace has {len(metadata.members())} member packages")
    return metadata
