"""Unit tests for FileStoreClient."""

import httpx
import pytest

from common.types import ByteRange
from transfer.client import FileStoreClient
from transfer.exceptions import (
    ChunkHashMismatchError,
    RequestRejectedError,
    ResourceNotFoundError,
    TransportError,
)


def mock_client(handler, max_retries: int = 0) -> FileStoreClient:
    return FileStoreClient(
        'http://test',
        max_retries=max_retries,
        retry_backoff_multiplier=2,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def no_sleep(monkeypatch):
    """Record retry delays instead of sleeping."""
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("transfer.client.asyncio.sleep", fake_sleep)
    return delays


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_404_maps_to_resource_not_found(self):
        client = mock_client(lambda request: httpx.Response(
            404, json={'detail': 'File missing', 'code': 'RESOURCE_NOT_FOUND'}
        ))

        with pytest.raises(ResourceNotFoundError, match='File missing'):
            await client.get_properties('share', '', 'f.bin')

    @pytest.mark.asyncio
    async def test_md5_mismatch_maps_to_chunk_hash_mismatch(self):
        client = mock_client(lambda request: httpx.Response(
            400, json={'detail': 'bad md5', 'code': 'MD5_MISMATCH'}
        ))

        with pytest.raises(ChunkHashMismatchError) as exc_info:
            await client.write_range('share', '', 'f.bin', ByteRange(0, 2), b'abc', 'bogus')
        assert isinstance(exc_info.value, TransportError)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_other_4xx_maps_to_request_rejected(self):
        client = mock_client(lambda request: httpx.Response(
            400, json={'detail': 'Invalid range', 'code': 'INVALID_RANGE'}
        ))

        with pytest.raises(RequestRejectedError) as exc_info:
            await client.clear_range('share', '', 'f.bin', ByteRange(0, 9))
        assert exc_info.value.code == 'INVALID_RANGE'

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        client = mock_client(lambda request: httpx.Response(400, text='plain failure'))

        with pytest.raises(RequestRejectedError, match='plain failure'):
            await client.delete_file('share', '', 'f.bin')


class TestRetries:
    @pytest.mark.asyncio
    async def test_5xx_is_retried_with_backoff(self, no_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503, json={'detail': 'busy'})
            return httpx.Response(201, json={'name': 's', 'created_at': 'now'})

        client = mock_client(handler, max_retries=3)
        await client.create_share('s')

        assert len(calls) == 3
        assert no_sleep == [1, 2]

    @pytest.mark.asyncio
    async def test_5xx_after_retries_raises_transport_error(self, no_sleep):
        client = mock_client(lambda request: httpx.Response(500, json={'detail': 'down', 'code': 'INTERNAL_ERROR'}), max_retries=2)

        with pytest.raises(TransportError) as exc_info:
            await client.create_share('s')
        assert exc_info.value.status_code == 500
        assert len(no_sleep) == 2

    @pytest.mark.asyncio
    async def test_network_error_raises_transport_error(self, no_sleep):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = mock_client(handler, max_retries=1)

        with pytest.raises(TransportError, match='Cannot connect'):
            await client.share_exists('s')
        assert no_sleep == [1]

    @pytest.mark.asyncio
    async def test_4xx_is_not_retried(self, no_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(409, json={'detail': 'exists', 'code': 'SHARE_ALREADY_EXISTS'})

        client = mock_client(handler, max_retries=3)
        assert await client.create_share_if_not_exists('s') is False
        assert len(calls) == 1
        assert no_sleep == []


class TestRequests:
    @pytest.mark.asyncio
    async def test_write_range_sends_query_body_and_md5(self):
        seen = {}

        def handler(request):
            seen['path'] = request.url.path
            seen['params'] = dict(request.url.params)
            seen['body'] = request.content
            seen['md5'] = request.headers.get('Content-MD5')
            seen['request_id'] = request.headers.get('X-Request-ID')
            return httpx.Response(201, json={'start': 0, 'end': 2, 'last_modified': 'now'})

        client = mock_client(handler)
        await client.write_range('share', 'dir/sub', 'f.bin', ByteRange(0, 2), b'abc', 'digest==')

        assert seen['path'] == '/ranges/share/dir/sub/f.bin'
        assert seen['params'] == {'start': '0', 'end': '2'}
        assert seen['body'] == b'abc'
        assert seen['md5'] == 'digest=='
        assert seen['request_id']

    @pytest.mark.asyncio
    async def test_read_range_parses_headers(self):
        def handler(request):
            assert request.headers['Range'] == 'bytes=2-4'
            assert request.headers['X-Range-Get-Content-MD5'] == 'true'
            return httpx.Response(206, content=b'cde', headers={
                'X-File-Size': '10',
                'X-Content-MD5': 'stored==',
                'Content-MD5': 'range==',
                'Content-Type': 'application/octet-stream',
            })

        client = mock_client(handler)
        result = await client.read_range('share', '', 'f.bin', ByteRange(2, 4), range_get_content_md5=True)

        assert result.data == b'cde'
        assert result.file_size == 10
        assert result.stored_md5 == 'stored=='
        assert result.range_md5 == 'range=='

    @pytest.mark.asyncio
    async def test_exists_helpers(self):
        def handler(request):
            if request.url.path.endswith('present'):
                return httpx.Response(200, json={
                    'share': 's', 'directory': '', 'name': 'present', 'content_length': 1,
                    'content_type': 'application/octet-stream', 'created_at': 'now', 'last_modified': 'now',
                })
            return httpx.Response(404, json={'detail': 'missing', 'code': 'RESOURCE_NOT_FOUND'})

        client = mock_client(handler)
        assert await client.file_exists('s', '', 'present') is True
        assert await client.file_exists('s', '', 'absent') is False
        assert await client.delete_file_if_exists('s', '', 'absent') is False


class TestAgainstFileServer:
    @pytest.mark.asyncio
    async def test_share_and_directory_lifecycle(self, store_client):
        assert await store_client.create_share_if_not_exists('docs') is True
        assert await store_client.create_share_if_not_exists('docs') is False
        assert await store_client.share_exists('docs')

        assert await store_client.create_directory_if_not_exists('docs', 'a') is True
        assert await store_client.create_directory_if_not_exists('docs', 'a') is False
        assert await store_client.directory_exists('docs', 'a')

        await store_client.delete_directory('docs', 'a')
        assert not await store_client.directory_exists('docs', 'a')

        assert await store_client.delete_share_if_exists('docs') is True
        assert await store_client.delete_share_if_exists('docs') is False

    @pytest.mark.asyncio
    async def test_allocate_write_list_and_read(self, store_client):
        await store_client.create_share('docs')
        properties = await store_client.allocate('docs', '', 'f.bin', 1024, content_type='application/x-test')
        assert properties.content_length == 1024
        assert properties.content_type == 'application/x-test'

        await store_client.write_range('docs', '', 'f.bin', ByteRange(0, 99), b'a' * 100)
        await store_client.write_range('docs', '', 'f.bin', ByteRange(500, 599), b'b' * 100)

        assert await store_client.list_ranges('docs', '', 'f.bin') == [ByteRange(0, 99), ByteRange(500, 599)]
        assert await store_client.list_ranges('docs', '', 'f.bin', 50, 549) == [ByteRange(50, 99), ByteRange(500, 549)]

        result = await store_client.read_range('docs', '', 'f.bin', ByteRange(90, 109))
        assert result.data == b'a' * 10 + b'\x00' * 10
        assert result.file_size == 1024

    @pytest.mark.asyncio
    async def test_set_properties(self, store_client):
        await store_client.create_share('docs')
        await store_client.allocate('docs', '', 'f.bin', 1, content_type='text/plain')

        properties = await store_client.set_properties('docs', '', 'f.bin', content_md5='abc==')

        assert properties.content_md5 == 'abc=='
        assert properties.content_type == 'text/plain'
