"""Tests for chunk planning."""

import pytest

from common.types import ByteRange
from transfer.planner import plan_chunks

KB = 1024
MB = 1024 * 1024


def assert_covers(plan, start, end):
    """The chunks tile [start, end] in order with no gaps or overlaps."""
    expected = start
    for index, chunk in enumerate(plan.chunks):
        assert chunk.index == index
        assert chunk.range.start == expected
        expected = chunk.range.end + 1
    assert expected == end + 1
    assert [c.is_last for c in plan.chunks] == [False] * (len(plan) - 1) + [True]


class TestPlanChunks:
    def test_empty_file_has_no_chunks(self):
        plan = plan_chunks(0, 4 * MB, 32 * MB)
        assert len(plan) == 0
        assert plan.range is None
        assert plan.length == 0

    def test_small_file_is_single_shot(self):
        plan = plan_chunks(1 * KB, 4 * MB, 32 * MB)
        assert len(plan) == 1
        assert plan.chunks[0].range == ByteRange(0, KB - 1)
        assert plan.chunks[0].is_last

    def test_size_equal_to_threshold_is_single_shot(self):
        plan = plan_chunks(32 * MB, 4 * MB, 32 * MB)
        assert len(plan) == 1

    def test_large_file_is_chunked_with_short_last_chunk(self):
        size = 32 * MB + 1
        plan = plan_chunks(size, 4 * MB, 32 * MB)

        assert len(plan) == 9
        assert all(c.length == 4 * MB for c in plan.chunks[:-1])
        assert plan.chunks[-1].length == 1
        assert_covers(plan, 0, size - 1)

    def test_exact_multiple_has_full_last_chunk(self):
        plan = plan_chunks(4 * KB, 1 * KB, 0)
        assert len(plan) == 4
        assert plan.chunks[-1].length == KB
        assert_covers(plan, 0, 4 * KB - 1)

    def test_sub_range_is_clipped_to_file(self):
        plan = plan_chunks(1000, 100, 0, range_start=250, range_end=5000)

        assert plan.range == ByteRange(250, 999)
        assert plan.is_sub_range
        assert_covers(plan, 250, 999)
        assert plan.chunks[0].length == 100

    def test_open_ended_sub_range(self):
        plan = plan_chunks(1000, 4 * MB, 32 * MB, range_start=900)
        assert plan.range == ByteRange(900, 999)
        assert len(plan) == 1

    def test_full_range_is_not_sub_range(self):
        plan = plan_chunks(1000, 4 * MB, 32 * MB, range_start=0, range_end=999)
        assert not plan.is_sub_range

    def test_range_start_beyond_file_is_rejected(self):
        with pytest.raises(ValueError):
            plan_chunks(1000, 100, 0, range_start=1000)

    def test_inverted_range_is_rejected(self):
        with pytest.raises(ValueError):
            plan_chunks(1000, 100, 0, range_start=500, range_end=100)

    def test_invalid_chunk_size_is_rejected(self):
        with pytest.raises(ValueError):
            plan_chunks(1000, 0, 0)
