"""Pydantic schemas for share and directory endpoints."""

from pydantic import BaseModel


class ShareResponse(BaseModel):
    """Response model for share creation and lookup."""
    name: str
    created_at: str


class DirectoryResponse(BaseModel):
    """Response model for directory creation and lookup."""
    share: str
    path: str
    created_at: str
