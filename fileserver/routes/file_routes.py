"""File, property and range API routes."""

from typing import Optional

from fastapi import APIRouter, Header, Query, Request, status
from fastapi.responses import StreamingResponse

from common.constants import (
    HEADER_CONTENT_MD5,
    HEADER_FILE_SIZE,
    HEADER_RANGE_GET_CONTENT_MD5,
    HEADER_STORED_CONTENT_MD5,
)
from common.types import ByteRange
from fileserver.exceptions import InvalidRangeError
from fileserver.repositories.file_repository import RemoteFile
from fileserver.schemas.files import (
    CreateFileRequest,
    FilePropertiesResponse,
    ListRangesResponse,
    RangeModel,
    RangeWriteResponse,
    SetPropertiesRequest,
)
from fileserver.services.file_service import FileService
from fileserver.utils import parse_range_header

router = APIRouter(prefix="/files", tags=["Files"])
properties_router = APIRouter(prefix="/properties", tags=["Properties"])
ranges_router = APIRouter(prefix="/ranges", tags=["Ranges"])


def _to_properties(remote_file: RemoteFile) -> FilePropertiesResponse:
    return FilePropertiesResponse(
        share=remote_file.share,
        directory=remote_file.directory,
        name=remote_file.name,
        content_length=remote_file.size,
        content_type=remote_file.content_type,
        content_md5=remote_file.content_md5,
        created_at=remote_file.created_at.isoformat(),
        last_modified=remote_file.last_modified.isoformat(),
    )


def _query_range(start: Optional[int], end: Optional[int]) -> ByteRange:
    if start is None or end is None:
        raise InvalidRangeError("Both 'start' and 'end' query parameters are required")
    try:
        return ByteRange(start, end)
    except ValueError as e:
        raise InvalidRangeError(str(e))


@router.put("/{share}/{path:path}", response_model=FilePropertiesResponse, status_code=status.HTTP_201_CREATED)
async def create_file(share: str, path: str, request: CreateFileRequest):
    """
    Allocate a fixed-size file, overwriting any file at the same path.

    Parameters:
        - size: Declared size in bytes; never changes afterwards
        - content_type: Optional stored content type
        - content_md5: Optional stored whole-file MD5 (base64)

    Raises:
        - 400: Invalid name or size
        - 404: Share or parent directory not found
    """
    remote_file = FileService().create_file(
        share, path, request.size, request.content_type, request.content_md5
    )
    return _to_properties(remote_file)


@router.get("/{share}/{path:path}")
async def read_file(
    share: str,
    path: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    range_get_content_md5: Optional[str] = Header(None, alias=HEADER_RANGE_GET_CONTENT_MD5),
):
    """
    Read a whole file, or the sub-range named by a 'Range: bytes=a-b' header.

    Returns:
        - 200 with the whole file, or 206 with the range
        - X-Content-MD5: stored whole-file digest, if any
        - X-File-Size: declared file size
        - Content-MD5: digest of the returned range, when requested

    Raises:
        - 400: Malformed range, or range digest requested for more than 4 MiB
        - 404: File not found
        - 416: Range starts beyond the end of the file
    """
    service = FileService()
    remote_file = service.get_file(share, path)
    byte_range = parse_range_header(range_header, remote_file.size)
    want_md5 = (range_get_content_md5 or "").lower() == "true"

    result = service.read(share, path, byte_range, range_get_content_md5=want_md5)

    headers = {
        "Content-Length": str(result.length),
        HEADER_FILE_SIZE: str(remote_file.size),
    }
    if remote_file.content_md5:
        headers[HEADER_STORED_CONTENT_MD5] = remote_file.content_md5
    if result.range_md5:
        headers[HEADER_CONTENT_MD5] = result.range_md5
    if byte_range is not None:
        headers["Content-Range"] = f"bytes {byte_range.start}-{byte_range.end}/{remote_file.size}"

    return StreamingResponse(
        result.stream,
        status_code=status.HTTP_206_PARTIAL_CONTENT if byte_range else status.HTTP_200_OK,
        media_type=remote_file.content_type,
        headers=headers,
    )


@router.delete("/{share}/{path:path}")
async def delete_file(share: str, path: str):
    """
    Delete a file and its content.

    Raises:
        - 404: File not found
    """
    FileService().delete_file(share, path)
    return {"deleted": True}


@properties_router.get("/{share}/{path:path}", response_model=FilePropertiesResponse)
async def get_properties(share: str, path: str):
    """
    Get file metadata (size, content type, stored MD5).

    Raises:
        - 404: File not found
    """
    return _to_properties(FileService().get_file(share, path))


@properties_router.put("/{share}/{path:path}", response_model=FilePropertiesResponse)
async def set_properties(share: str, path: str, request: SetPropertiesRequest):
    """
    Update stored content settings; omitted fields keep their value.

    Raises:
        - 404: File not found
    """
    remote_file = FileService().set_properties(
        share, path, request.content_type, request.content_md5
    )
    return _to_properties(remote_file)


@ranges_router.put("/{share}/{path:path}", response_model=RangeWriteResponse, status_code=status.HTTP_201_CREATED)
async def write_range(
    share: str,
    path: str,
    request: Request,
    start: Optional[int] = Query(None, ge=0),
    end: Optional[int] = Query(None, ge=0),
    content_md5: Optional[str] = Header(None, alias=HEADER_CONTENT_MD5),
):
    """
    Write the raw request body into [start, end] of an allocated file.

    Parameters:
        - start, end: Inclusive byte offsets
        - Content-MD5 header: optional transactional digest of the body

    Raises:
        - 400: Range outside the file, body length mismatch, range too large,
               or Content-MD5 mismatch (code MD5_MISMATCH)
        - 404: File not found
    """
    byte_range = _query_range(start, end)
    data = await request.body()
    remote_file = FileService().write_range(share, path, byte_range, data, content_md5)
    return RangeWriteResponse(
        start=byte_range.start,
        end=byte_range.end,
        content_md5=content_md5,
        last_modified=remote_file.last_modified.isoformat(),
    )


@ranges_router.delete("/{share}/{path:path}", response_model=RangeWriteResponse)
async def clear_range(
    share: str,
    path: str,
    start: Optional[int] = Query(None, ge=0),
    end: Optional[int] = Query(None, ge=0),
):
    """
    Zero [start, end] and drop it from the written-range list.

    Raises:
        - 400: Range outside the file
        - 404: File not found
    """
    byte_range = _query_range(start, end)
    remote_file = FileService().clear_range(share, path, byte_range)
    return RangeWriteResponse(
        start=byte_range.start,
        end=byte_range.end,
        last_modified=remote_file.last_modified.isoformat(),
    )


@ranges_router.get("/{share}/{path:path}", response_model=ListRangesResponse)
async def list_ranges(
    share: str,
    path: str,
    start: Optional[int] = Query(None, ge=0),
    end: Optional[int] = Query(None, ge=0),
):
    """
    List written ranges in ascending order, optionally clipped to [start, end].

    Raises:
        - 404: File not found
    """
    ranges = FileService().list_ranges(share, path, start, end)
    return ListRangesResponse(ranges=[RangeModel(start=r.start, end=r.end) for r in ranges])
