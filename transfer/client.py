"""Async HTTP client for the file service, with retry logic and error mapping."""

import asyncio
import uuid
from typing import List, Optional
from urllib.parse import quote

import httpx

from common.constants import (
    HEADER_CONTENT_MD5,
    HEADER_FILE_SIZE,
    HEADER_RANGE_GET_CONTENT_MD5,
    HEADER_REQUEST_ID,
    HEADER_STORED_CONTENT_MD5,
)
from common.logging_config import get_logger
from common.types import ByteRange
from common.utils import join_remote_path
from transfer.exceptions import (
    ChunkHashMismatchError,
    RequestRejectedError,
    ResourceNotFoundError,
    TransportError,
)
from transfer.models import FileProperties, RangeData

logger = get_logger(__name__)


class FileStoreClient:
    """
    Client for the share/directory/file REST API.

    Server errors (5xx) and network failures are retried with exponential
    backoff; 4xx responses are mapped to transfer exceptions immediately.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        max_retries: int = 3,
        retry_backoff_multiplier: float = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize file store client.

        Args:
            base_url: Service root, e.g. "http://localhost:8000"
            timeout: Per-request timeout in seconds
            max_retries: Retry attempts after the first try
            retry_backoff_multiplier: Base of the exponential retry delay
            transport: Optional httpx transport (in-process app, mocks)
        """
        self.base_url = base_url
        self.max_retries = max_retries
        self.retry_backoff_multiplier = retry_backoff_multiplier
        self.session = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        logger.info(f"Initialized FileStoreClient [base_url={base_url}]")

    async def close(self) -> None:
        await self.session.aclose()

    async def __aenter__(self) -> "FileStoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @staticmethod
    def _file_path(share: str, directory: str, name: str) -> str:
        return quote(f"{share}/{join_remote_path(directory, name)}", safe='/')

    async def _request_with_retry(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, PUT, DELETE)
            endpoint: API endpoint path
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response with a status below 400

        Raises:
            ResourceNotFoundError: On 404
            ChunkHashMismatchError: When the service reports MD5_MISMATCH
            RequestRejectedError: On any other 4xx
            TransportError: On 5xx or network failure once retries are exhausted
        """
        request_id = str(uuid.uuid4())
        headers = kwargs.pop('headers', None) or {}
        headers[HEADER_REQUEST_ID] = request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={request_id}]")

        last_exception = None
        response = None
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.session.request(method, endpoint, headers=headers, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.RemoteProtocolError) as e:
                last_exception = e
                response = None
                if attempt < self.max_retries:
                    delay = self.retry_backoff_multiplier ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{self.max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={request_id}]"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={request_id}]"
                )
                break

            logger.debug(
                f"Response received: {method} {endpoint} status={response.status_code} [request_id={request_id}]"
            )

            if response.status_code >= 500 and attempt < self.max_retries:
                delay = self.retry_backoff_multiplier ** attempt
                logger.warning(
                    f"Server error (attempt {attempt + 1}/{self.max_retries + 1}): "
                    f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={request_id}]"
                )
                await asyncio.sleep(delay)
                continue

            break

        if response is None:
            if isinstance(last_exception, httpx.TimeoutException):
                raise TransportError("Request timed out. Server may be overloaded.")
            raise TransportError(f"Cannot connect to file service at {self.base_url}: {last_exception}")

        if response.status_code >= 400:
            self._raise_for_response(method, endpoint, response, request_id)
        return response

    @staticmethod
    def _raise_for_response(method: str, endpoint: str, response: httpx.Response, request_id: str) -> None:
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        status_code = response.status_code
        if status_code < 500:
            logger.warning(
                f"Client error: {method} {endpoint} status={status_code} code={code} [request_id={request_id}]"
            )
        else:
            logger.error(
                f"Server error: {method} {endpoint} status={status_code} code={code} [request_id={request_id}]"
            )

        if status_code == 404:
            raise ResourceNotFoundError(detail)
        if code == 'MD5_MISMATCH':
            raise ChunkHashMismatchError(detail, status_code=status_code, code=code)
        if status_code < 500:
            raise RequestRejectedError(detail, status_code=status_code, code=code)
        raise TransportError(detail, status_code=status_code, code=code)

    async def create_share(self, share: str) -> None:
        await self._request_with_retry('PUT', f"/shares/{quote(share)}")

    async def create_share_if_not_exists(self, share: str) -> bool:
        """Returns True when the share was created, False when it existed."""
        try:
            await self.create_share(share)
        except RequestRejectedError as e:
            if e.code == 'SHARE_ALREADY_EXISTS':
                return False
            raise
        return True

    async def delete_share(self, share: str) -> None:
        await self._request_with_retry('DELETE', f"/shares/{quote(share)}")

    async def delete_share_if_exists(self, share: str) -> bool:
        try:
            await self.delete_share(share)
        except ResourceNotFoundError:
            return False
        return True

    async def share_exists(self, share: str) -> bool:
        try:
            await self._request_with_retry('GET', f"/shares/{quote(share)}")
        except ResourceNotFoundError:
            return False
        return True

    async def create_directory(self, share: str, directory: str) -> None:
        await self._request_with_retry('PUT', f"/directories/{quote(f'{share}/{directory}', safe='/')}")

    async def create_directory_if_not_exists(self, share: str, directory: str) -> bool:
        try:
            await self.create_directory(share, directory)
        except RequestRejectedError as e:
            if e.code == 'DIRECTORY_ALREADY_EXISTS':
                return False
            raise
        return True

    async def delete_directory(self, share: str, directory: str) -> None:
        await self._request_with_retry('DELETE', f"/directories/{quote(f'{share}/{directory}', safe='/')}")

    async def directory_exists(self, share: str, directory: str) -> bool:
        try:
            await self._request_with_retry('GET', f"/directories/{quote(f'{share}/{directory}', safe='/')}")
        except ResourceNotFoundError:
            return False
        return True

    async def allocate(
        self,
        share: str,
        directory: str,
        name: str,
        size: int,
        content_type: Optional[str] = None,
        content_md5: Optional[str] = None,
    ) -> FileProperties:
        """
        Create a zero-filled file of a fixed size, replacing any existing file.

        Args:
            share: Share name
            directory: Directory path ("" for the share root)
            name: File name
            size: Declared size in bytes
            content_type: Stored content type
            content_md5: Stored whole-file MD5, if known up front

        Returns:
            Properties of the new file
        """
        response = await self._request_with_retry(
            'PUT',
            f"/files/{self._file_path(share, directory, name)}",
            json={'size': size, 'content_type': content_type, 'content_md5': content_md5},
        )
        return FileProperties.from_dict(response.json())

    async def write_range(
        self,
        share: str,
        directory: str,
        name: str,
        byte_range: ByteRange,
        data: bytes,
        transactional_md5: Optional[str] = None,
    ) -> None:
        headers = {'Content-Type': 'application/octet-stream'}
        if transactional_md5:
            headers[HEADER_CONTENT_MD5] = transactional_md5
        await self._request_with_retry(
            'PUT',
            f"/ranges/{self._file_path(share, directory, name)}",
            params={'start': byte_range.start, 'end': byte_range.end},
            content=data,
            headers=headers,
        )

    async def clear_range(self, share: str, directory: str, name: str, byte_range: ByteRange) -> None:
        await self._request_with_retry(
            'DELETE',
            f"/ranges/{self._file_path(share, directory, name)}",
            params={'start': byte_range.start, 'end': byte_range.end},
        )

    async def list_ranges(
        self,
        share: str,
        directory: str,
        name: str,
        range_start: Optional[int] = None,
        range_end: Optional[int] = None,
    ) -> List[ByteRange]:
        """List written ranges, optionally restricted to [range_start, range_end]."""
        params = {}
        if range_start is not None:
            params['start'] = range_start
        if range_end is not None:
            params['end'] = range_end
        response = await self._request_with_retry(
            'GET', f"/ranges/{self._file_path(share, directory, name)}", params=params
        )
        return [ByteRange.from_dict(r) for r in response.json()['ranges']]

    async def read_range(
        self,
        share: str,
        directory: str,
        name: str,
        byte_range: Optional[ByteRange] = None,
        range_get_content_md5: bool = False,
    ) -> RangeData:
        """
        Read the whole file, or one range of it.

        Args:
            byte_range: Range to read; None reads the whole file
            range_get_content_md5: Ask the service to digest the range

        Returns:
            RangeData with the body and metadata headers
        """
        headers = {}
        if byte_range is not None:
            headers['Range'] = byte_range.to_header()
        if range_get_content_md5:
            headers[HEADER_RANGE_GET_CONTENT_MD5] = 'true'
        response = await self._request_with_retry(
            'GET', f"/files/{self._file_path(share, directory, name)}", headers=headers
        )
        data = response.content
        return RangeData(
            data=data,
            file_size=int(response.headers.get(HEADER_FILE_SIZE, len(data))),
            stored_md5=response.headers.get(HEADER_STORED_CONTENT_MD5),
            range_md5=response.headers.get(HEADER_CONTENT_MD5),
            content_type=response.headers.get('Content-Type'),
        )

    async def get_properties(self, share: str, directory: str, name: str) -> FileProperties:
        response = await self._request_with_retry(
            'GET', f"/properties/{self._file_path(share, directory, name)}"
        )
        return FileProperties.from_dict(response.json())

    async def set_properties(
        self,
        share: str,
        directory: str,
        name: str,
        content_type: Optional[str] = None,
        content_md5: Optional[str] = None,
    ) -> FileProperties:
        """Update stored content settings; None leaves a field unchanged."""
        response = await self._request_with_retry(
            'PUT',
            f"/properties/{self._file_path(share, directory, name)}",
            json={'content_type': content_type, 'content_md5': content_md5},
        )
        return FileProperties.from_dict(response.json())

    async def delete_file(self, share: str, directory: str, name: str) -> None:
        await self._request_with_retry('DELETE', f"/files/{self._file_path(share, directory, name)}")

    async def delete_file_if_exists(self, share: str, directory: str, name: str) -> bool:
        try:
            await self.delete_file(share, directory, name)
        except ResourceNotFoundError:
            return False
        return True

    async def file_exists(self, share: str, directory: str, name: str) -> bool:
        try:
            await self.get_properties(share, directory, name)
        except ResourceNotFoundError:
            return False
        return True
