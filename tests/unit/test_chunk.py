"""Unit tests for chunk selection."""

import pytest

from cargo_matrix.core.exceptions import ChunkArgumentError
from cargo_matrix.matrix.chunk import chunk_size, select_chunk


@pytest.fixture
def items():
    return list(range(10))


class TestSelectChunk:
    """Test splitting work into contiguous chunks."""

    def test_three_chunks(self, items):
        assert select_chunk(items, 3, 1) == [0, 1, 2, 3]
        assert select_chunk(items, 3, 2) == [4, 5, 6, 7]
        assert select_chunk(items, 3, 3) == [8, 9]

    def test_five_chunks(self, items):
        assert chunk_size(len(items), 5) == 2
        assert select_chunk(items, 5, 1) == [0, 1]
        assert select_chunk(items, 5, 5) == [8, 9]

    def test_single_chunk_is_everything(self, items):
        assert select_chunk(items, 1, 1) == items

    def test_chunks_cover_items_in_order(self, items):
        combined = []
        for index in range(1, 5):
            combined.extend(select_chunk(items, 4, index))
        assert combined == items

    def test_index_past_last_run_is_empty(self):
        assert select_chunk([1, 2, 3], 5, 4) == []
        assert select_chunk([1, 2, 3], 5, 5) == []

    def test_no_items(self):
        assert select_chunk([], 3, 2) == []

    @pytest.mark.parametrize("num_chunks,chunk_index", [(0, 1), (0, 0), (3, 0), (3, 4)])
    def test_invalid_arguments(self, items, num_chunks, chunk_index):
        with pytest.raises(ChunkArgumentError):
            select_chunk(items, num_chunks, chunk_index)
