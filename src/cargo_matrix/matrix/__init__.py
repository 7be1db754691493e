"""Feature matrix generation and chunking."""

from cargo_matrix.matrix.chunk import select_chunk, validate_chunk_args
from cargo_matrix.matrix.generator import extract_seed, find_implicits, generate, powerset

__all__ = [
    "extract_seed",
    "find_implicits",
    "generate",
    "powerset",
    "select_chunk",
    "validate_chunk_args",
]
