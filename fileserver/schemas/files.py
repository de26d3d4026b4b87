"""Pydantic schemas for file, property and range endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field


class CreateFileRequest(BaseModel):
    """Request model for allocating a fixed-size file."""
    size: int = Field(..., ge=0)
    content_type: Optional[str] = None
    content_md5: Optional[str] = None


class FilePropertiesResponse(BaseModel):
    """Response model for file metadata."""
    share: str
    directory: str
    name: str
    content_length: int
    content_type: str
    content_md5: Optional[str] = None
    created_at: str
    last_modified: str


class SetPropertiesRequest(BaseModel):
    """Request model for updating stored content settings."""
    content_type: Optional[str] = None
    content_md5: Optional[str] = None


class RangeModel(BaseModel):
    """A closed byte interval."""
    start: int
    end: int


class ListRangesResponse(BaseModel):
    """Response model for the written-range listing."""
    ranges: List[RangeModel]


class RangeWriteResponse(BaseModel):
    """Response model for range writes and clears."""
    start: int
    end: int
    content_md5: Optional[str] = None
    last_modified: str
