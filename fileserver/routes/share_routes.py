"""Share and directory API routes."""

from fastapi import APIRouter, status

from fileserver.schemas.shares import DirectoryResponse, ShareResponse
from fileserver.services.share_service import ShareService

router = APIRouter(prefix="/shares", tags=["Shares"])
directory_router = APIRouter(prefix="/directories", tags=["Directories"])


@router.put("/{share}", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
async def create_share(share: str):
    """
    Create a share.

    Raises:
        - 400: Invalid share name
        - 409: Share already exists
    """
    created = ShareService().create_share(share)
    return ShareResponse(name=created.name, created_at=created.created_at.isoformat())


@router.get("/{share}", response_model=ShareResponse)
async def get_share(share: str):
    """
    Get share metadata.

    Raises:
        - 404: Share not found
    """
    found = ShareService().get_share(share)
    return ShareResponse(name=found.name, created_at=found.created_at.isoformat())


@router.delete("/{share}")
async def delete_share(share: str):
    """
    Delete a share with all of its directories and files.

    Raises:
        - 404: Share not found
    """
    ShareService().delete_share(share)
    return {"deleted": True}


@directory_router.put(
    "/{share}/{path:path}", response_model=DirectoryResponse, status_code=status.HTTP_201_CREATED
)
async def create_directory(share: str, path: str):
    """
    Create a directory; its parent must already exist.

    Raises:
        - 404: Share or parent directory not found
        - 409: Directory already exists
    """
    created = ShareService().create_directory(share, path)
    return DirectoryResponse(
        share=created.share, path=created.path, created_at=created.created_at.isoformat()
    )


@directory_router.get("/{share}/{path:path}", response_model=DirectoryResponse)
async def get_directory(share: str, path: str):
    """
    Get directory metadata.

    Raises:
        - 404: Share or directory not found
    """
    found = ShareService().get_directory(share, path)
    return DirectoryResponse(share=found.share, path=found.path, created_at=found.created_at.isoformat())


@directory_router.delete("/{share}/{path:path}")
async def delete_directory(share: str, path: str):
    """
    Delete an empty directory.

    Raises:
        - 404: Directory not found
        - 409: Directory not empty
    """
    ShareService().delete_directory(share, path)
    return {"deleted": True}
