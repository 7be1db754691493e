"""Running cargo once per feature set of a package."""

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape

from cargo_matrix.core.exceptions import SpawnError, TaskFailure
from cargo_matrix.models.feature import FeatureMatrix, FeatureSet

Runner = Callable[..., subprocess.CompletedProcess]


class TaskKind(str, Enum):
    """Supported cargo subcommands."""

    BUILD = "build"
    CHECK = "check"
    CLIPPY = "clippy"
    TEST = "test"
    COVERAGE = "coverage"

    @property
    def subcommand(self) -> list[str]:
        """Arguments naming the cargo subcommand."""
        if self is TaskKind.COVERAGE:
            return ["llvm-cov"]
        return [self.value]

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    TaskKind.BUILD: "Building",
    TaskKind.CHECK: "Checking",
    TaskKind.CLIPPY: "Clippy",
    TaskKind.TEST: "Testing",
    TaskKind.COVERAGE: "Covering",
}


class TaskStatus(str, Enum):
    """Lifecycle of one (package, feature set) invocation."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Outcome of one cargo invocation."""

    package: str
    features: FeatureSet
    command: list[str]
    status: TaskStatus = TaskStatus.PENDING
    exit_code: Optional[int] = None


@dataclass
class Task:
    """All cargo invocations for one package.

    Feature sets run in matrix order; the first failure stops the task.
    """

    kind: TaskKind
    package: str
    matrix: FeatureMatrix
    cargo: str = "cargo"
    manifest_path: Optional[Path] = None
    args: list[str] = field(default_factory=list)
    dry_run: bool = False

    def command(self, feature_set: FeatureSet) -> list[str]:
        """Build the cargo command line for ``feature_set``."""
        cmd = [self.cargo, *self.kind.subcommand, "--no-default-features", "-p", self.package]
        if feature_set:
            cmd.extend(["-F", str(feature_set)])
        if self.manifest_path is not None:
            cmd.extend(["--manifest-path", str(self.manifest_path)])
        cmd.extend(self.args)
        return cmd

    def execute(self, runner: Optional[Runner] = None, console: Optional[Console] = None) -> list[TaskResult]:
        """Run cargo for every feature set in the matrix.

        Args:
            runner: Callable with the ``subprocess.run`` signature, defaults to subprocess.run
            console: Console for progress output

        Returns:
            One succeeded result per feature set

        Raises:
            SpawnError: If cargo cannot be launched
            TaskFailure: On the first unsuccessful invocation
        """
        runner = runner or subprocess.run
        console = console or Console()
        results: list[TaskResult] = []

        for feature_set in self.matrix:
            result = TaskResult(self.package, feature_set, self.command(feature_set))

            console.print(
                f"[bold cyan]{self.kind.label:>12}[/bold cyan] "
                f"package={escape(self.package)} features=\\[{escape(str(feature_set))}]",
                highlight=False,
            )
            console.print(
                f"[bold cyan]{'Running':>12}[/bold cyan] {escape(' '.join(result.command))}\n",
                highlight=False,
            )

            result.status = TaskStatus.RUNNING
            if self.dry_run:
                result.exit_code = 0
            else:
                result.exit_code = self._spawn(result.command, runner)

            if result.exit_code != 0:
                result.status = TaskStatus.FAILED
                logger.error(f"{self.package} [{feature_set}] failed with exit code {result.exit_code}")
                raise TaskFailure(self.package, str(feature_set), result.exit_code)

            result.status = TaskStatus.SUCCEEDED
            console.print(f"[bold cyan]{'Result':>12}[/bold cyan] [bright_green]OK[/bright_green]\n")
            results.append(result)

        return results

    def _spawn(self, cmd: list[str], runner: Runner) -> Optional[int]:
        """Run ``cmd`` with inherited stdio; None means killed by a signal."""
        logger.info(f"Running {' '.join(cmd)}")
        try:
            completed = runner(cmd, check=False)
        except OSError as e:
            raise SpawnError(f"Failed to launch '{cmd[0]}': {e}") from e

        if completed.returncode < 0:
            return None
        return completed.returncode
