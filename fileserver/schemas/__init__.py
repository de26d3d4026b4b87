"""Pydantic schemas for API requests and responses."""

from fileserver.schemas.shares import ShareResponse, DirectoryResponse
from fileserver.schemas.files import (
    CreateFileRequest,
    FilePropertiesResponse,
    SetPropertiesRequest,
    RangeModel,
    ListRangesResponse,
    RangeWriteResponse,
)
from fileserver.schemas.common import ErrorResponse

__all__ = [
    "ShareResponse",
    "DirectoryResponse",
    "CreateFileRequest",
    "FilePropertiesResponse",
    "SetPropertiesRequest",
    "RangeModel",
    "ListRangesResponse",
    "RangeWriteResponse",
    "ErrorResponse",
]
