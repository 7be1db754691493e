"""cargo-matrix exception classes."""

from typing import Optional


class MatrixError(Exception):
    """Base exception for all cargo-matrix errors."""
    pass


class ConfigError(MatrixError):
    """Matrix configuration related errors."""
    pass


class MissingDefaultChannelError(ConfigError):
    """Raised when a configuration has no channel named ``default``."""

    def __init__(self, message: str = "channel 'default' not defined"):
        super().__init__(message)


class ChunkArgumentError(MatrixError):
    """Invalid chunk count or chunk index."""
    pass


class MetadataError(MatrixError):
    """Workspace metadata could not be read from cargo."""
    pass


class PackageNotFoundError(MatrixError):
    """A requested package is not a member of the workspace."""
    pass


class SpawnError(MatrixError):
    """The build tool could not be launched."""
    pass


class TaskFailure(MatrixError):
    """A build tool invocation exited unsuccessfully.

    ``exit_code`` is None when the child was terminated by a signal.
    """

    def __init__(self, package: str, features: str, exit_code: Optional[int]):
        self.package = package
        self.features = features
        self.exit_code = exit_code
        status = f"exit code {exit_code}" if exit_code is not None else "terminated by signal"
        super().__init__(f"package={package} features=[{features}] failed with {status}")
