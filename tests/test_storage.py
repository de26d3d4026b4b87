"""Tests for on-disk blob storage."""

import pytest

from fileserver import storage


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    directory = tmp_path / 'files'
    monkeypatch.setattr("fileserver.storage.DATA_DIR", directory)
    return directory


def test_allocate_blob_is_zero_filled(data_dir):
    path = storage.allocate_blob('blob-1', 1000)

    assert str(data_dir) in path
    assert storage.get_blob_path('blob-1').stat().st_size == 1000
    assert storage.read_range('blob-1', 0, 1000) == b'\x00' * 1000


def test_allocate_blob_resets_existing(data_dir):
    storage.allocate_blob('blob-1', 10)
    storage.write_at('blob-1', 0, b'0123456789')

    storage.allocate_blob('blob-1', 4)

    assert storage.read_range('blob-1', 0, 10) == b'\x00' * 4


def test_write_at_and_read_range(data_dir):
    storage.allocate_blob('blob-1', 20)

    storage.write_at('blob-1', 5, b'hello')

    assert storage.read_range('blob-1', 3, 9) == b'\x00\x00hello\x00\x00'
    assert storage.get_blob_path('blob-1').stat().st_size == 20


def test_zero_range(data_dir):
    storage.allocate_blob('blob-1', 10)
    storage.write_at('blob-1', 0, b'abcdefghij')

    storage.zero_range('blob-1', 2, 5)

    assert storage.read_range('blob-1', 0, 10) == b'ab\x00\x00\x00\x00\x00hij'


def test_read_range_streaming_pieces(data_dir):
    storage.allocate_blob('blob-1', 10)
    storage.write_at('blob-1', 0, b'abcdefghij')

    pieces = list(storage.read_range_streaming('blob-1', 1, 8, piece_size=3))

    assert pieces == [b'bcd', b'efg', b'hi']


def test_delete_blob(data_dir):
    storage.allocate_blob('blob-1', 1)

    assert storage.delete_blob('blob-1') is True
    assert storage.delete_blob('blob-1') is False
    assert not storage.get_blob_path('blob-1').exists()
