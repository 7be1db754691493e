"""Runtime: reading metadata and driving cargo."""

from cargo_matrix.runtime.execute import Task, TaskKind, TaskResult, TaskStatus
from cargo_matrix.runtime.metadata import parse_metadata, read_metadata
from cargo_matrix.runtime.runner import (
    PackageMatrix,
    RunOptions,
    collect_matrices,
    execute,
    matrix_document,
    plan,
    select_work,
)

__all__ = [
    "Task",
    "TaskKind",
    "TaskResult",
    "TaskStatus",
    "parse_metadata",
    "read_metadata",
    "PackageMatrix",
    "RunOptions",
    "collect_matrices",
    "execute",
    "matrix_document",
    "plan",
    "select_work",
]
