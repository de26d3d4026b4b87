"""Chunked, resumable, integrity-checked uploads and downloads."""

import asyncio
import io
import os
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import AsyncIterator, Awaitable, BinaryIO, Callable, ContextManager, Optional, Union

from common.constants import MAX_RANGE_SIZE_BYTES
from common.logging_config import get_logger
from common.types import ByteRange
from common.utils import join_remote_path
from transfer.client import FileStoreClient
from transfer.exceptions import LocalIOError, RequestRejectedError, SizeMismatchError
from transfer.integrity import IntegrityValidator, OrderedWriter
from transfer.models import FileProperties, TransferResult
from transfer.options import TransferOptions
from transfer.planner import ChunkPlan, ChunkSpec, plan_chunks
from transfer.progress import TransferProgress
from transfer.scheduler import CancellationToken, TransferScheduler

logger = get_logger(__name__)

SinkFactory = Callable[[], ContextManager[Callable[[bytes], object]]]


class Transfer:
    """
    Handle for a transfer running in the background.

    Returned before any work happens so callers can poll `progress`; await
    the handle for the TransferResult.
    """

    def __init__(self, coro: Awaitable[TransferResult], progress: TransferProgress, cancellation: CancellationToken):
        self.progress = progress
        self._cancellation = cancellation
        self._task = asyncio.ensure_future(coro)

    def __await__(self):
        return self._task.__await__()

    def cancel(self) -> None:
        """Stop dispatching chunks; awaiting then raises TransferAbortedError."""
        self._cancellation.cancel()

    def done(self) -> bool:
        return self._task.done()

    def result(self) -> TransferResult:
        return self._task.result()


@contextmanager
def _local_file(path: Path, mode: str):
    try:
        handle = open(path, mode)
    except OSError as e:
        raise LocalIOError(str(path), f"Cannot open local file '{path}': {e}") from e
    with handle:
        def write(data: bytes) -> None:
            try:
                handle.write(data)
            except OSError as e:
                raise LocalIOError(str(path), f"Cannot write local file '{path}': {e}") from e
        yield write


def _read_exact(stream: BinaryIO, length: int, source: str) -> bytes:
    try:
        data = stream.read(length)
    except OSError as e:
        raise LocalIOError(source, f"Cannot read '{source}': {e}") from e
    return data or b''


def _requested_range(start: int, end: int) -> ByteRange:
    try:
        return ByteRange(start, end)
    except ValueError as e:
        raise RequestRejectedError(str(e), code='INVALID_RANGE') from e


class FileTransferService:
    """
    Moves data between local sources/sinks and remote files.

    Every transfer method must be called from a running event loop; it
    starts the work as a task and returns a Transfer handle immediately.
    """

    def __init__(self, client: FileStoreClient, default_options: Optional[TransferOptions] = None):
        self.client = client
        self.default_options = default_options or TransferOptions()

    def _options(self, options: Optional[TransferOptions]) -> TransferOptions:
        return options if options is not None else self.default_options

    def _start(self, name: str, run: Callable[[TransferProgress, CancellationToken], Awaitable[TransferResult]]) -> Transfer:
        progress = TransferProgress(name)
        cancellation = CancellationToken()
        return Transfer(run(progress, cancellation), progress, cancellation)

    # Uploads

    def create_file_from_local_file(
        self,
        share: str,
        directory: str,
        name: str,
        local_path: Union[str, Path],
        options: Optional[TransferOptions] = None,
    ) -> Transfer:
        """
        Upload a local file, replacing any remote file at the same path.

        Raises:
            LocalIOError: Immediately, if the local file is missing or unreadable
        """
        path = Path(local_path)
        if not path.is_file():
            raise LocalIOError(str(path), f"Local file '{path}' does not exist")
        if not os.access(path, os.R_OK):
            raise LocalIOError(str(path), f"Local file '{path}' is not readable")
        size = path.stat().st_size
        options = self._options(options)

        async def run(progress, cancellation):
            try:
                handle = open(path, 'rb')
            except OSError as e:
                raise LocalIOError(str(path), f"Cannot open local file '{path}': {e}") from e
            with handle:
                return await self._upload(share, directory, name, handle, size, str(path), options, progress, cancellation)

        return self._start(join_remote_path(directory, name), run)

    def create_file_from_stream(
        self,
        share: str,
        directory: str,
        name: str,
        stream: BinaryIO,
        size: int,
        options: Optional[TransferOptions] = None,
    ) -> Transfer:
        """
        Upload `size` bytes read from a binary stream.

        Raises (when awaited):
            SizeMismatchError: If the stream ends before `size` bytes
        """
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        options = self._options(options)

        async def run(progress, cancellation):
            return await self._upload(share, directory, name, stream, size, '<stream>', options, progress, cancellation)

        return self._start(join_remote_path(directory, name), run)

    def create_file_from_text(
        self,
        share: str,
        directory: str,
        name: str,
        text: Union[str, bytes],
        options: Optional[TransferOptions] = None,
        encoding: str = 'utf-8',
    ) -> Transfer:
        data = text.encode(encoding) if isinstance(text, str) else text
        return self.create_file_from_stream(share, directory, name, io.BytesIO(data), len(data), options)

    def create_ranges_from_stream(
        self,
        share: str,
        directory: str,
        name: str,
        stream: BinaryIO,
        range_start: int,
        range_end: int,
        options: Optional[TransferOptions] = None,
    ) -> Transfer:
        """
        Write [range_start, range_end] of an existing file from a stream.

        Other ranges of the file are left untouched.
        """
        target = ByteRange(range_start, range_end)
        options = self._options(options)

        async def run(progress, cancellation):
            progress.set_total_size(target.length)
            if not options.skip_size_check:
                properties = await self.client.get_properties(share, directory, name)
                if target.end >= properties.content_length:
                    raise SizeMismatchError(target.end + 1, properties.content_length)

            plan = plan_chunks(target.end + 1, options.chunk_size, options.chunk_size, target.start, target.end)
            validator = IntegrityValidator(options)
            await self._write_chunks(share, directory, name, plan, stream, '<stream>', validator, options, progress, cancellation)
            progress.mark_finished()
            return TransferResult(
                share=share, directory=directory, name=name,
                bytes_transferred=target.length, byte_range=target,
            )

        return self._start(join_remote_path(directory, name), run)

    async def _write_chunks(
        self,
        share: str,
        directory: str,
        name: str,
        plan: ChunkPlan,
        stream: BinaryIO,
        source: str,
        validator: IntegrityValidator,
        options: TransferOptions,
        progress: TransferProgress,
        cancellation: CancellationToken,
    ) -> None:
        single_range = len(plan) == 1

        def prepare(chunk: ChunkSpec) -> bytes:
            data = _read_exact(stream, chunk.length, source)
            if len(data) != chunk.length:
                raise SizeMismatchError(plan.length, chunk.range.start - plan.range.start + len(data))
            validator.update(data)
            return data

        async def worker(chunk: ChunkSpec, data: bytes) -> None:
            await self.client.write_range(
                share, directory, name, chunk.range, data,
                transactional_md5=validator.chunk_md5(data, single_range=single_range),
            )
            progress.report_chunk_complete(len(data))

        await TransferScheduler(options.parallelism, cancellation).run(plan, worker, prepare)

    async def _upload(
        self,
        share: str,
        directory: str,
        name: str,
        stream: BinaryIO,
        size: int,
        source: str,
        options: TransferOptions,
        progress: TransferProgress,
        cancellation: CancellationToken,
    ) -> TransferResult:
        progress.set_total_size(size)
        logger.info(f"Uploading {source} to {share}/{join_remote_path(directory, name)} ({size} bytes)")

        properties = await self.client.allocate(share, directory, name, size, content_type=options.content_type)
        if not options.skip_size_check and properties.content_length != size:
            raise SizeMismatchError(size, properties.content_length)

        validator = IntegrityValidator(options)
        plan = plan_chunks(size, options.chunk_size, options.chunk_size)
        await self._write_chunks(share, directory, name, plan, stream, source, validator, options, progress, cancellation)

        content_md5 = validator.content_md5_to_store()
        if content_md5:
            properties = await self.client.set_properties(share, directory, name, content_md5=content_md5)

        progress.mark_finished()
        logger.info(f"Uploaded {share}/{join_remote_path(directory, name)} in {len(plan)} chunks")
        return TransferResult(
            share=share, directory=directory, name=name,
            bytes_transferred=size, content_md5=content_md5, properties=properties,
        )

    # Downloads

    def get_file_to_local_file(
        self,
        share: str,
        directory: str,
        name: str,
        local_path: Union[str, Path],
        options: Optional[TransferOptions] = None,
    ) -> Transfer:
        """
        Download a remote file (or a sub-range of it) into a local file.

        The local file is only created once the remote file is known to exist.

        Raises:
            LocalIOError: Immediately, if the destination directory is missing
        """
        path = Path(local_path)
        if not path.parent.is_dir():
            raise LocalIOError(str(path), f"Directory '{path.parent}' does not exist")
        options = self._options(options)

        async def run(progress, cancellation):
            return await self._download(share, directory, name, lambda: _local_file(path, 'wb'), options, progress, cancellation)

        return self._start(join_remote_path(directory, name), run)

    def get_file_to_stream(
        self,
        share: str,
        directory: str,
        name: str,
        stream: BinaryIO,
        options: Optional[TransferOptions] = None,
    ) -> Transfer:
        """Download into a writable binary stream; nothing is written if the file is missing."""
        options = self._options(options)

        async def run(progress, cancellation):
            return await self._download(share, directory, name, lambda: nullcontext(stream.write), options, progress, cancellation)

        return self._start(join_remote_path(directory, name), run)

    def get_file_to_bytes(
        self,
        share: str,
        directory: str,
        name: str,
        options: Optional[TransferOptions] = None,
    ) -> Transfer:
        options = self._options(options)

        async def run(progress, cancellation):
            buffer = io.BytesIO()
            result = await self._download(share, directory, name, lambda: nullcontext(buffer.write), options, progress, cancellation)
            result.content = buffer.getvalue()
            return result

        return self._start(join_remote_path(directory, name), run)

    def get_file_to_text(
        self,
        share: str,
        directory: str,
        name: str,
        options: Optional[TransferOptions] = None,
        encoding: str = 'utf-8',
    ) -> Transfer:
        options = self._options(options)

        async def run(progress, cancellation):
            buffer = io.BytesIO()
            result = await self._download(share, directory, name, lambda: nullcontext(buffer.write), options, progress, cancellation)
            result.content = buffer.getvalue()
            result.text = result.content.decode(encoding)
            return result

        return self._start(join_remote_path(directory, name), run)

    def _plan_download(self, size: int, options: TransferOptions) -> ChunkPlan:
        threshold = options.single_shot_threshold
        if options.use_transactional_md5:
            # Range digests are only served for ranges within the write limit.
            threshold = min(threshold, options.chunk_size, MAX_RANGE_SIZE_BYTES)
        try:
            return plan_chunks(size, options.chunk_size, threshold, options.range_start, options.range_end)
        except ValueError as e:
            code = 'RANGE_NOT_SATISFIABLE' if (options.range_start or 0) >= size else 'INVALID_RANGE'
            raise RequestRejectedError(str(e), code=code) from e

    async def _fetch_chunks(
        self,
        share: str,
        directory: str,
        name: str,
        plan: ChunkPlan,
        writer: OrderedWriter,
        validator: IntegrityValidator,
        options: TransferOptions,
        progress: TransferProgress,
        cancellation: CancellationToken,
    ) -> None:
        whole_file = len(plan) == 1 and not plan.is_sub_range and not options.use_transactional_md5

        async def worker(chunk: ChunkSpec) -> None:
            result = await self.client.read_range(
                share, directory, name,
                None if whole_file else chunk.range,
                range_get_content_md5=options.use_transactional_md5,
            )
            if len(result.data) != chunk.length:
                raise SizeMismatchError(chunk.length, len(result.data))
            validator.verify_chunk(chunk.range, result.data, result.range_md5)
            writer.submit(chunk.index, result.data)
            progress.report_chunk_complete(len(result.data))

        await TransferScheduler(options.parallelism, cancellation).run(plan, worker)

    async def _download(
        self,
        share: str,
        directory: str,
        name: str,
        open_sink: SinkFactory,
        options: TransferOptions,
        progress: TransferProgress,
        cancellation: CancellationToken,
    ) -> TransferResult:
        remote_path = f"{share}/{join_remote_path(directory, name)}"
        validator = IntegrityValidator(options)

        if options.skip_size_check:
            if options.use_transactional_md5:
                return await self._download_probed(share, directory, name, open_sink, validator, options, progress, cancellation)
            return await self._download_single(share, directory, name, open_sink, validator, options, progress)

        properties = await self.client.get_properties(share, directory, name)
        plan = self._plan_download(properties.content_length, options)
        progress.set_total_size(plan.length)
        logger.info(f"Downloading {remote_path} range={plan.range} in {len(plan)} chunks")

        with open_sink() as write:
            writer = OrderedWriter(write, validator)
            await self._fetch_chunks(share, directory, name, plan, writer, validator, options, progress, cancellation)

        if writer.bytes_written != plan.length:
            raise SizeMismatchError(plan.length, writer.bytes_written)
        if validator.should_validate_download(plan, properties.content_md5):
            validator.verify_content(properties.content_md5)

        progress.mark_finished()
        return TransferResult(
            share=share, directory=directory, name=name,
            bytes_transferred=writer.bytes_written,
            content_md5=properties.content_md5,
            properties=properties,
            byte_range=plan.range,
        )

    async def _download_probed(
        self,
        share: str,
        directory: str,
        name: str,
        open_sink: SinkFactory,
        validator: IntegrityValidator,
        options: TransferOptions,
        progress: TransferProgress,
        cancellation: CancellationToken,
    ) -> TransferResult:
        """
        Download with no properties round-trip while still digesting every range.

        The first range read reports the file size; the rest of the target
        is planned from it and fetched like any chunked download.
        """
        start = options.range_start or 0
        first_end = start + options.chunk_size - 1
        if options.range_end is not None:
            first_end = min(first_end, options.range_end)
        first_range = _requested_range(start, first_end)

        try:
            first = await self.client.read_range(share, directory, name, first_range, range_get_content_md5=True)
        except RequestRejectedError as e:
            if e.code != 'RANGE_NOT_SATISFIABLE' or start != 0:
                raise
            # Byte 0 is missing only from an empty file.
            with open_sink():
                pass
            progress.mark_finished()
            return TransferResult(share=share, directory=directory, name=name)

        plan = self._plan_download(first.file_size, options)
        head = plan.chunks[0]
        if len(first.data) != head.length:
            raise SizeMismatchError(head.length, len(first.data))
        validator.verify_chunk(head.range, first.data, first.range_md5)
        progress.set_total_size(plan.length)
        logger.info(f"Downloading {share}/{join_remote_path(directory, name)} range={plan.range} in {len(plan)} chunks")

        rest = ChunkPlan(chunks=plan.chunks[1:], total_size=plan.total_size, range=plan.range)
        with open_sink() as write:
            writer = OrderedWriter(write, validator)
            writer.submit(head.index, first.data)
            progress.report_chunk_complete(len(first.data))
            await self._fetch_chunks(share, directory, name, rest, writer, validator, options, progress, cancellation)

        if writer.bytes_written != plan.length:
            raise SizeMismatchError(plan.length, writer.bytes_written)
        if validator.should_validate_download(plan, first.stored_md5):
            validator.verify_content(first.stored_md5)

        progress.mark_finished()
        return TransferResult(
            share=share, directory=directory, name=name,
            bytes_transferred=writer.bytes_written,
            content_md5=first.stored_md5,
            byte_range=plan.range,
        )

    async def _download_single(
        self,
        share: str,
        directory: str,
        name: str,
        open_sink: SinkFactory,
        validator: IntegrityValidator,
        options: TransferOptions,
        progress: TransferProgress,
    ) -> TransferResult:
        """One GET for the whole target, with no properties round-trip."""
        byte_range = None
        if options.is_sub_range:
            start = options.range_start or 0
            # The service clips an open end to the last byte of the file.
            end = options.range_end if options.range_end is not None else start + (1 << 62)
            byte_range = _requested_range(start, end)

        result = await self.client.read_range(share, directory, name, byte_range)
        if byte_range is not None:
            byte_range = ByteRange.from_length(byte_range.start, len(result.data))

        progress.set_total_size(len(result.data))
        with open_sink() as write:
            write(result.data)
        validator.update(result.data)
        progress.report_chunk_complete(len(result.data))

        if not options.is_sub_range and not options.disable_content_md5_validation and result.stored_md5:
            validator.verify_content(result.stored_md5)

        progress.mark_finished()
        return TransferResult(
            share=share, directory=directory, name=name,
            bytes_transferred=len(result.data),
            content_md5=result.stored_md5,
            byte_range=byte_range,
        )

    # Streams

    def open_write_stream(
        self,
        share: str,
        directory: str,
        name: str,
        size: Optional[int] = None,
        options: Optional[TransferOptions] = None,
    ) -> "FileWriteStream":
        return FileWriteStream(self.client, share, directory, name, size, self._options(options))

    def open_read_stream(
        self,
        share: str,
        directory: str,
        name: str,
        options: Optional[TransferOptions] = None,
    ) -> "FileReadStream":
        return FileReadStream(self, share, directory, name, self._options(options))


class FileWriteStream:
    """
    Async context manager that writes a remote file sequentially.

    With a size, a new file of that size is allocated on entry; without one,
    writes go into the existing file from offset 0. Data is buffered and
    written in chunk-size ranges.

    Usage:
        async with service.open_write_stream(share, "", "a.bin", size=n) as stream:
            await stream.write(data)
    """

    def __init__(
        self,
        client: FileStoreClient,
        share: str,
        directory: str,
        name: str,
        size: Optional[int],
        options: TransferOptions,
    ):
        self.client = client
        self.share = share
        self.directory = directory
        self.name = name
        self.size = size
        self.options = options
        self.progress = TransferProgress(join_remote_path(directory, name))
        self.position = 0
        self._buffer = bytearray()
        self._validator = IntegrityValidator(options)
        self._closed = False

    async def __aenter__(self) -> "FileWriteStream":
        if self.size is None:
            properties = await self.client.get_properties(self.share, self.directory, self.name)
            self.size = properties.content_length
        else:
            await self.client.allocate(
                self.share, self.directory, self.name, self.size, content_type=self.options.content_type
            )
        self.progress.set_total_size(self.size)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            await self.close()

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise ValueError("Write to a closed stream")
        if self.position + len(self._buffer) + len(data) > self.size:
            raise SizeMismatchError(self.size, self.position + len(self._buffer) + len(data))
        self._buffer.extend(data)
        while len(self._buffer) >= self.options.chunk_size:
            piece = bytes(self._buffer[:self.options.chunk_size])
            del self._buffer[:self.options.chunk_size]
            await self._write_piece(piece)

    async def _write_piece(self, piece: bytes) -> None:
        byte_range = ByteRange.from_length(self.position, len(piece))
        self._validator.update(piece)
        await self.client.write_range(
            self.share, self.directory, self.name, byte_range, piece,
            transactional_md5=self._validator.chunk_md5(piece),
        )
        self.position += len(piece)
        self.progress.report_chunk_complete(len(piece))

    async def close(self) -> None:
        """Flush buffered data and store the content MD5 if requested."""
        if self._closed:
            return
        if self._buffer:
            piece = bytes(self._buffer)
            self._buffer.clear()
            await self._write_piece(piece)
        self._closed = True

        if self.position == self.size:
            content_md5 = self._validator.content_md5_to_store()
            if content_md5:
                await self.client.set_properties(self.share, self.directory, self.name, content_md5=content_md5)
            self.progress.mark_finished()


class FileReadStream:
    """
    Async iterator over the bytes of a remote file, chunk by chunk in order.

    The stored content MD5 is checked after the last chunk, as for any
    full download.
    """

    def __init__(
        self,
        service: FileTransferService,
        share: str,
        directory: str,
        name: str,
        options: TransferOptions,
    ):
        self.service = service
        self.share = share
        self.directory = directory
        self.name = name
        self.options = options
        self.progress = TransferProgress(join_remote_path(directory, name))
        self.properties: Optional[FileProperties] = None

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        client = self.service.client
        validator = IntegrityValidator(self.options)
        self.properties = await client.get_properties(self.share, self.directory, self.name)
        plan = self.service._plan_download(self.properties.content_length, self.options)
        self.progress.set_total_size(plan.length)

        for chunk in plan:
            result = await client.read_range(
                self.share, self.directory, self.name, chunk.range,
                range_get_content_md5=self.options.use_transactional_md5,
            )
            if len(result.data) != chunk.length:
                raise SizeMismatchError(chunk.length, len(result.data))
            validator.verify_chunk(chunk.range, result.data, result.range_md5)
            validator.update(result.data)
            self.progress.report_chunk_complete(len(result.data))
            yield result.data

        if validator.should_validate_download(plan, self.properties.content_md5):
            validator.verify_content(self.properties.content_md5)
        self.progress.mark_finished()
