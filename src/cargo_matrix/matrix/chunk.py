"""Splitting the per-package task list across parallel runners."""

import math
from typing import Sequence, TypeVar

from loguru import logger

from cargo_matrix.core.exceptions import ChunkArgumentError

T = TypeVar("T")


def validate_chunk_args(num_chunks: int, chunk_index: int) -> None:
    """Check a chunk count and 1-based chunk index.

    Raises:
        ChunkArgumentError: If the count is zero or the index is outside 1..num_chunks
    """
    if num_chunks <= 0:
        raise ChunkArgumentError("number of chunks must be at least 1")
    if chunk_index <= 0:
        raise ChunkArgumentError("chunk index is 1-based and must be at least 1")
    if chunk_index > num_chunks:
        raise ChunkArgumentError(
            f"chunk index {chunk_index} is greater than the number of chunks {num_chunks}"
        )


def chunk_size(total: int, num_chunks: int) -> int:
    return math.ceil(total / num_chunks)


def select_chunk(items: Sequence[T], num_chunks: int, chunk_index: int) -> list[T]:
    """Return the ``chunk_index``-th (1-based) of ``num_chunks`` contiguous runs.

    Runs have ``ceil(len(items) / num_chunks)`` items each, the last one
    possibly fewer. An index past the last non-empty run selects nothing.

    Raises:
        ChunkArgumentError: If the chunk arguments are invalid
    """
    validate_chunk_args(num_chunks, chunk_index)

    size = chunk_size(len(items), num_chunks)
    start = (chunk_index - 1) * size
    selected = list(items[start:start + size])

    logger.info(
        f"Chunk {chunk_index}/{num_chunks}: {len(selected)} of {len(items)} items "
        f"(chunk size {size})"
    )
    return selected
