"""Tests for file server API endpoints."""

import pytest

from common.checksum import compute_md5

HELLO = b"Hello, World!"
HELLO_MD5 = "ZajifYh5KDgxtmS9i38K1A=="


@pytest.fixture
def share(api):
    assert api.put('/shares/docs').status_code == 201
    return 'docs'


@pytest.fixture
def hello_file(api, share):
    """A 13-byte file at docs/hello.txt with its content written."""
    response = api.put('/files/docs/hello.txt', json={'size': len(HELLO), 'content_type': 'text/plain'})
    assert response.status_code == 201
    response = api.put('/ranges/docs/hello.txt?start=0&end=12', content=HELLO)
    assert response.status_code == 201
    return 'docs/hello.txt'


def test_root_endpoint(api):
    response = api.get('/')
    assert response.status_code == 200
    assert response.json()['status'] == 'running'


def test_health_endpoint(api):
    response = api.get('/health')
    assert response.status_code == 200
    assert response.json() == {'status': 'healthy', 'service': 'fileserver'}


def test_request_id_header_is_echoed(api):
    response = api.get('/health', headers={'X-Request-ID': 'abc-123'})
    assert response.headers['X-Request-ID'] == 'abc-123'


class TestShares:
    def test_create_and_get_share(self, api):
        assert api.put('/shares/photos').status_code == 201
        response = api.get('/shares/photos')
        assert response.status_code == 200
        assert response.json()['name'] == 'photos'

    def test_duplicate_share_conflicts(self, api, share):
        response = api.put('/shares/docs')
        assert response.status_code == 409
        assert response.json()['code'] == 'SHARE_ALREADY_EXISTS'

    def test_missing_share(self, api):
        response = api.get('/shares/nope')
        assert response.status_code == 404
        assert response.json()['code'] == 'SHARE_NOT_FOUND'

    def test_invalid_share_name(self, api):
        response = api.put('/shares/bad:name')
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_NAME'

    def test_delete_share_removes_files(self, api, hello_file, server_env):
        assert list(server_env.iterdir())
        assert api.delete('/shares/docs').status_code == 200
        assert api.get('/shares/docs').status_code == 404
        assert list(server_env.iterdir()) == []


class TestDirectories:
    def test_create_nested_directories(self, api, share):
        assert api.put('/directories/docs/a').status_code == 201
        response = api.put('/directories/docs/a/b')
        assert response.status_code == 201
        assert response.json()['path'] == 'a/b'
        assert api.get('/directories/docs/a/b').status_code == 200

    def test_parent_must_exist(self, api, share):
        response = api.put('/directories/docs/x/y')
        assert response.status_code == 404
        assert response.json()['code'] == 'PARENT_NOT_FOUND'

    def test_duplicate_directory(self, api, share):
        api.put('/directories/docs/a')
        response = api.put('/directories/docs/a')
        assert response.status_code == 409

    def test_delete_non_empty_directory(self, api, share):
        api.put('/directories/docs/a')
        api.put('/files/docs/a/f.bin', json={'size': 1})
        response = api.delete('/directories/docs/a')
        assert response.status_code == 409
        assert response.json()['code'] == 'DIRECTORY_NOT_EMPTY'

        api.delete('/files/docs/a/f.bin')
        assert api.delete('/directories/docs/a').status_code == 200
        assert api.get('/directories/docs/a').status_code == 404


class TestFiles:
    def test_create_file_in_missing_share(self, api):
        response = api.put('/files/nope/f.bin', json={'size': 10})
        assert response.status_code == 404

    def test_create_file_in_missing_directory(self, api, share):
        response = api.put('/files/docs/missing/f.bin', json={'size': 10})
        assert response.status_code == 404
        assert response.json()['code'] == 'PARENT_NOT_FOUND'

    def test_negative_size_is_rejected(self, api, share):
        assert api.put('/files/docs/f.bin', json={'size': -1}).status_code == 422

    def test_new_file_is_zero_filled(self, api, share):
        api.put('/files/docs/zeros.bin', json={'size': 16})
        response = api.get('/files/docs/zeros.bin')
        assert response.status_code == 200
        assert response.content == b'\x00' * 16
        assert response.headers['X-File-Size'] == '16'
        assert response.headers['Content-Type'] == 'application/octet-stream'

    def test_read_whole_file(self, api, hello_file):
        response = api.get('/files/docs/hello.txt')
        assert response.status_code == 200
        assert response.content == HELLO
        assert response.headers['Content-Type'].startswith('text/plain')
        assert 'X-Content-MD5' not in response.headers

    def test_read_range(self, api, hello_file):
        response = api.get('/files/docs/hello.txt', headers={'Range': 'bytes=7-11'})
        assert response.status_code == 206
        assert response.content == b'World'
        assert response.headers['Content-Range'] == 'bytes 7-11/13'

    def test_read_range_end_is_clipped(self, api, hello_file):
        response = api.get('/files/docs/hello.txt', headers={'Range': 'bytes=7-1000'})
        assert response.status_code == 206
        assert response.content == b'World!'

    def test_open_ended_range(self, api, hello_file):
        response = api.get('/files/docs/hello.txt', headers={'Range': 'bytes=7-'})
        assert response.content == b'World!'

    def test_range_beyond_end_not_satisfiable(self, api, hello_file):
        response = api.get('/files/docs/hello.txt', headers={'Range': 'bytes=13-20'})
        assert response.status_code == 416
        assert response.json()['code'] == 'RANGE_NOT_SATISFIABLE'

    def test_malformed_range(self, api, hello_file):
        response = api.get('/files/docs/hello.txt', headers={'Range': 'items=0-1'})
        assert response.status_code == 400

    def test_range_md5(self, api, hello_file):
        response = api.get(
            '/files/docs/hello.txt',
            headers={'Range': 'bytes=0-12', 'X-Range-Get-Content-MD5': 'true'}
        )
        assert response.status_code == 206
        assert response.headers['Content-MD5'] == HELLO_MD5

    def test_range_md5_needs_a_range(self, api, hello_file):
        response = api.get('/files/docs/hello.txt', headers={'X-Range-Get-Content-MD5': 'true'})
        assert response.status_code == 400

    def test_stored_md5_is_reported(self, api, share):
        api.put('/files/docs/h.txt', json={'size': 13, 'content_md5': HELLO_MD5})
        response = api.get('/files/docs/h.txt', headers={'Range': 'bytes=0-3'})
        assert response.headers['X-Content-MD5'] == HELLO_MD5

    def test_overwrite_replaces_file(self, api, hello_file):
        response = api.put('/files/docs/hello.txt', json={'size': 4})
        assert response.status_code == 201
        assert api.get('/files/docs/hello.txt').content == b'\x00' * 4
        assert api.get('/ranges/docs/hello.txt').json()['ranges'] == []

    def test_delete_file(self, api, hello_file):
        assert api.delete('/files/docs/hello.txt').status_code == 200
        response = api.get('/files/docs/hello.txt')
        assert response.status_code == 404
        assert response.json()['code'] == 'RESOURCE_NOT_FOUND'

    def test_zero_size_file(self, api, share):
        api.put('/files/docs/empty', json={'size': 0})
        response = api.get('/files/docs/empty')
        assert response.status_code == 200
        assert response.content == b''


class TestProperties:
    def test_get_properties(self, api, hello_file):
        response = api.get('/properties/docs/hello.txt')
        data = response.json()
        assert data['content_length'] == 13
        assert data['content_type'] == 'text/plain'
        assert data['content_md5'] is None
        assert data['name'] == 'hello.txt'
        assert data['directory'] == ''

    def test_set_properties_updates_only_given_fields(self, api, hello_file):
        response = api.put('/properties/docs/hello.txt', json={'content_md5': HELLO_MD5})
        data = response.json()
        assert data['content_md5'] == HELLO_MD5
        assert data['content_type'] == 'text/plain'

    def test_missing_file_properties(self, api, share):
        assert api.get('/properties/docs/none').status_code == 404


class TestRanges:
    def test_ranged_writes_are_tracked(self, api, share):
        api.put('/files/docs/sparse.bin', json={'size': 2048})
        api.put('/ranges/docs/sparse.bin?start=0&end=511', content=b'a' * 512)
        api.put('/ranges/docs/sparse.bin?start=1024&end=1535', content=b'b' * 512)

        response = api.get('/ranges/docs/sparse.bin')
        assert response.json()['ranges'] == [
            {'start': 0, 'end': 511},
            {'start': 1024, 'end': 1535},
        ]

        content = api.get('/files/docs/sparse.bin').content
        assert content[:512] == b'a' * 512
        assert content[512:1024] == b'\x00' * 512
        assert content[1024:1536] == b'b' * 512

    def test_contiguous_writes_merge(self, api, share):
        api.put('/files/docs/f.bin', json={'size': 1024})
        api.put('/ranges/docs/f.bin?start=0&end=511', content=b'a' * 512)
        api.put('/ranges/docs/f.bin?start=512&end=1023', content=b'b' * 512)

        assert api.get('/ranges/docs/f.bin').json()['ranges'] == [{'start': 0, 'end': 1023}]

    def test_clear_range_splits_and_zeroes(self, api, share):
        api.put('/files/docs/f.bin', json={'size': 1024})
        api.put('/ranges/docs/f.bin?start=0&end=1023', content=b'x' * 1024)

        response = api.delete('/ranges/docs/f.bin?start=512&end=767')
        assert response.status_code == 200

        assert api.get('/ranges/docs/f.bin').json()['ranges'] == [
            {'start': 0, 'end': 511},
            {'start': 768, 'end': 1023},
        ]
        content = api.get('/files/docs/f.bin').content
        assert content[512:768] == b'\x00' * 256
        assert content[768:] == b'x' * 256

    def test_list_ranges_window(self, api, share):
        api.put('/files/docs/f.bin', json={'size': 1024})
        api.put('/ranges/docs/f.bin?start=0&end=1023', content=b'x' * 1024)

        response = api.get('/ranges/docs/f.bin?start=100&end=199')
        assert response.json()['ranges'] == [{'start': 100, 'end': 199}]

    def test_write_outside_file_is_rejected(self, api, share):
        api.put('/files/docs/f.bin', json={'size': 10})
        response = api.put('/ranges/docs/f.bin?start=5&end=10', content=b'x' * 6)
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_RANGE'

    def test_body_length_must_match_range(self, api, share):
        api.put('/files/docs/f.bin', json={'size': 10})
        response = api.put('/ranges/docs/f.bin?start=0&end=4', content=b'xyz')
        assert response.status_code == 400

    def test_range_query_parameters_are_required(self, api, share):
        api.put('/files/docs/f.bin', json={'size': 10})
        response = api.put('/ranges/docs/f.bin?start=0', content=b'x')
        assert response.status_code == 400

    def test_oversized_range_is_rejected(self, api, share, monkeypatch):
        monkeypatch.setattr("fileserver.config.MAX_RANGE_WRITE_BYTES", 4)
        api.put('/files/docs/f.bin', json={'size': 10})
        response = api.put('/ranges/docs/f.bin?start=0&end=4', content=b'x' * 5)
        assert response.status_code == 400

    def test_transactional_md5_is_checked(self, api, share):
        api.put('/files/docs/h.txt', json={'size': 13})

        response = api.put(
            '/ranges/docs/h.txt?start=0&end=12', content=HELLO,
            headers={'Content-MD5': compute_md5(b'something else')}
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'MD5_MISMATCH'
        assert api.get('/ranges/docs/h.txt').json()['ranges'] == []

        response = api.put(
            '/ranges/docs/h.txt?start=0&end=12', content=HELLO,
            headers={'Content-MD5': HELLO_MD5}
        )
        assert response.status_code == 201
        assert response.json()['content_md5'] == HELLO_MD5
