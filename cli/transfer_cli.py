"""Synchronous facade over the transfer engine used by CLI commands."""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx

from cli.config import Config
from cli.utils import display_progress, finish_progress
from common.logging_config import get_logger
from common.types import ByteRange
from common.utils import format_file_size, split_remote_path
from transfer.client import FileStoreClient
from transfer.engine import FileTransferService, Transfer
from transfer.exceptions import (
    HashMismatchError,
    LocalIOError,
    ResourceNotFoundError,
    SizeMismatchError,
    TransferAbortedError,
    TransferError,
    TransportError,
)

logger = get_logger(__name__)

PROGRESS_REFRESH_SECONDS = 0.2


class TransferCli:
    """Runs one engine operation per command and renders the outcome as text."""

    def __init__(self, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None, show_progress: bool = True):
        """
        Initialize the CLI facade.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (in-process app in tests)
            show_progress: Draw progress lines while transfers run
        """
        self.config = config
        self.transport = transport
        self.show_progress = show_progress

    def _open_client(self) -> FileStoreClient:
        retry_config = self.config.get_retry_config()
        return FileStoreClient(
            self.config.get_base_url(),
            timeout=self.config.get_timeout(),
            max_retries=retry_config['max_retries'],
            retry_backoff_multiplier=retry_config['retry_backoff_multiplier'],
            transport=self.transport,
        )

    def _run(self, action: str, operation: Callable[[FileStoreClient], Awaitable[str]]) -> str:
        async def run() -> str:
            async with self._open_client() as client:
                return await operation(client)

        try:
            return asyncio.run(run())
        except TransferError as e:
            logger.warning(f"{action} failed: {e}")
            return f"{action} failed: {self._format_error(e)}"
        except ValueError as e:
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error during {action.lower()}: {e}", exc_info=True)
            return f"Unexpected error during {action.lower()}: {e}"

    async def _watch(self, transfer: Transfer, verb: str):
        if self.show_progress:
            while not transfer.done():
                display_progress(transfer.progress, verb)
                await asyncio.sleep(PROGRESS_REFRESH_SECONDS)
        result = await transfer
        if self.show_progress:
            finish_progress(transfer.progress, verb)
        return result

    def _format_error(self, error: TransferError) -> str:
        """
        Map transfer errors to user-friendly messages.

        Args:
            error: Exception raised by the engine or client

        Returns:
            User-friendly error message
        """
        if isinstance(error, ResourceNotFoundError):
            return f"Not found: {error}"
        if isinstance(error, (HashMismatchError, SizeMismatchError, LocalIOError, TransferAbortedError)):
            return str(error)

        error_messages = {
            'SHARE_ALREADY_EXISTS': 'Share already exists.',
            'DIRECTORY_ALREADY_EXISTS': 'Directory already exists.',
            'DIRECTORY_NOT_EMPTY': 'Directory is not empty.',
            'INVALID_NAME': 'Invalid share, directory or file name.',
            'INVALID_RANGE': 'Invalid byte range.',
            'RANGE_NOT_SATISFIABLE': 'Range starts beyond the end of the file.',
            'MD5_MISMATCH': 'Content-MD5 check failed during transfer.',
        }

        if isinstance(error, TransportError):
            if error.code in error_messages:
                return f"{error_messages[error.code]} (Code: {error.code})"
            if error.status_code is not None:
                return f"{error} (HTTP {error.status_code})"
        return str(error)

    def make_share(self, share: str) -> str:
        async def operation(client: FileStoreClient) -> str:
            await client.create_share(share)
            return f"Share '{share}' created."
        return self._run("Create share", operation)

    def make_directory(self, share: str, directory: str) -> str:
        async def operation(client: FileStoreClient) -> str:
            await client.create_directory(share, directory)
            return f"Directory '{share}/{directory}' created."
        return self._run("Create directory", operation)

    def upload(self, local_path: str, share: str, remote_path: str, store_md5: bool = False, parallelism: Optional[int] = None) -> str:
        """
        Upload a local file.

        Args:
            local_path: Local file to read
            share: Destination share
            remote_path: "dir/sub/name" inside the share
            store_md5: Store the whole-file MD5 after the upload
            parallelism: Override the configured parallelism

        Returns:
            Success or error message
        """
        logger.info(f"Uploading {local_path} to {share}/{remote_path}")
        directory, name = split_remote_path(remote_path)

        async def operation(client: FileStoreClient) -> str:
            options = self.config.get_transfer_options().merged(
                store_content_md5=store_md5 or None, parallelism=parallelism
            )
            service = FileTransferService(client, options)
            transfer = service.create_file_from_local_file(share, directory, name, local_path)
            result = await self._watch(transfer, "Uploading")
            message = (
                f"Uploaded {local_path} -> {share}/{remote_path} "
                f"({format_file_size(result.bytes_transferred)} in {transfer.progress.get_elapsed_seconds():.2f}s, "
                f"{transfer.progress.get_average_speed()})"
            )
            if result.content_md5:
                message += f"\nContent-MD5: {result.content_md5}"
            return message

        return self._run("Upload", operation)

    def download(
        self,
        share: str,
        remote_path: str,
        local_path: str,
        range_start: Optional[int] = None,
        range_end: Optional[int] = None,
        verify: bool = True,
    ) -> str:
        """
        Download a file, or one byte range of it, into a local file.

        Returns:
            Success or error message
        """
        logger.info(f"Downloading {share}/{remote_path} to {local_path}")
        directory, name = split_remote_path(remote_path)

        async def operation(client: FileStoreClient) -> str:
            options = self.config.get_transfer_options().merged(
                range_start=range_start,
                range_end=range_end,
                disable_content_md5_validation=(not verify) or None,
            )
            service = FileTransferService(client, options)
            transfer = service.get_file_to_local_file(share, directory, name, Path(local_path))
            result = await self._watch(transfer, "Downloading")
            message = (
                f"Downloaded {share}/{remote_path} -> {local_path} "
                f"({format_file_size(result.bytes_transferred)})"
            )
            if result.byte_range is not None and options.is_sub_range:
                message += f"\nRange: bytes {result.byte_range.start}-{result.byte_range.end}"
            return message

        return self._run("Download", operation)

    def list_ranges(self, share: str, remote_path: str) -> str:
        directory, name = split_remote_path(remote_path)

        async def operation(client: FileStoreClient) -> str:
            ranges = await client.list_ranges(share, directory, name)
            if not ranges:
                return f"No written ranges in {share}/{remote_path}."
            lines = [f"Written ranges in {share}/{remote_path}:"]
            for byte_range in ranges:
                lines.append(f"  {byte_range.start}-{byte_range.end} ({format_file_size(byte_range.length)})")
            return "\n".join(lines)

        return self._run("List ranges", operation)

    def clear_range(self, share: str, remote_path: str, start: int, end: int) -> str:
        directory, name = split_remote_path(remote_path)

        async def operation(client: FileStoreClient) -> str:
            await client.clear_range(share, directory, name, ByteRange(start, end))
            return f"Cleared bytes {start}-{end} of {share}/{remote_path}."

        return self._run("Clear range", operation)

    def show_properties(self, share: str, remote_path: str) -> str:
        directory, name = split_remote_path(remote_path)

        async def operation(client: FileStoreClient) -> str:
            properties = await client.get_properties(share, directory, name)
            return "\n".join([
                f"File: {share}/{remote_path}",
                f"  Size: {properties.content_length} bytes ({format_file_size(properties.content_length)})",
                f"  Content-Type: {properties.content_type}",
                f"  Content-MD5: {properties.content_md5 or '(none)'}",
                f"  Last-Modified: {properties.last_modified}",
            ])

        return self._run("Get properties", operation)

    def remove(self, share: str, remote_path: str) -> str:
        directory, name = split_remote_path(remote_path)

        async def operation(client: FileStoreClient) -> str:
            await client.delete_file(share, directory, name)
            return f"Deleted {share}/{remote_path}."

        return self._run("Delete", operation)
