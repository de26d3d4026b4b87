"""Tests for digests, byte ranges and formatting helpers."""

import pytest

from common.checksum import IncrementalMd5Calculator, compute_md5
from common.types import ByteRange
from common.utils import format_file_size, format_speed, join_remote_path, split_remote_path

HELLO_MD5 = "ZajifYh5KDgxtmS9i38K1A=="
EMPTY_MD5 = "1B2M2Y8AsgTpgAmY7PhCfg=="


class TestChecksum:
    def test_compute_md5_is_base64(self):
        assert compute_md5(b"Hello, World!") == HELLO_MD5

    def test_empty_content_digest(self):
        assert compute_md5(b"") == EMPTY_MD5

    def test_different_content_differs(self):
        assert compute_md5(b"Hello, World?") != HELLO_MD5

    def test_incremental_matches_one_shot(self):
        calculator = IncrementalMd5Calculator()
        calculator.update(b"Hello, ")
        calculator.update(b"World!")

        assert calculator.bytes_processed == 13
        assert calculator.finalize() == HELLO_MD5

    def test_update_after_finalize_fails(self):
        calculator = IncrementalMd5Calculator()
        calculator.finalize()
        with pytest.raises(ValueError):
            calculator.update(b"x")

    def test_no_updates_gives_empty_digest(self):
        assert IncrementalMd5Calculator().finalize() == EMPTY_MD5


class TestByteRange:
    def test_length_and_header(self):
        byte_range = ByteRange(0, 511)
        assert byte_range.length == 512
        assert byte_range.to_header() == "bytes=0-511"

    def test_invalid_ranges(self):
        with pytest.raises(ValueError):
            ByteRange(-1, 5)
        with pytest.raises(ValueError):
            ByteRange(10, 9)

    def test_overlap_and_intersection(self):
        a = ByteRange(0, 9)
        assert a.overlaps(ByteRange(9, 20))
        assert not a.overlaps(ByteRange(10, 20))
        assert a.intersection(ByteRange(5, 20)) == ByteRange(5, 9)
        assert a.intersection(ByteRange(10, 20)) is None

    def test_dict_round_trip_and_from_length(self):
        assert ByteRange.from_dict({"start": 3, "end": 7}) == ByteRange(3, 7)
        assert ByteRange(3, 7).to_dict() == {"start": 3, "end": 7}
        assert ByteRange.from_length(100, 10) == ByteRange(100, 109)


class TestFormatting:
    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.50 KiB"),
        (4 * 1024 * 1024, "4.00 MiB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_format_speed(self):
        assert format_speed(2048) == "2.00 KiB/s"

    def test_split_and_join_remote_path(self):
        assert split_remote_path("dir/sub/name.txt") == ("dir/sub", "name.txt")
        assert split_remote_path("/name.txt") == ("", "name.txt")
        assert join_remote_path("dir/sub/", "name.txt") == "dir/sub/name.txt"
        assert join_remote_path("", "name.txt") == "name.txt"
