"""
File upload router.
Claim documents are stored on local disk, one folder per organization.
"""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from claimflow.application.use_cases.file_use_cases import (
    UploadFileUseCase, GetFileUseCase, DownloadFileUseCase, DeleteFileUseCase
)
from claimflow.domain.models.base import ValidationError
from claimflow.infrastructure.auth.dependencies import CurrentUser
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.rate_limiting.dependencies import upload_rate_limit
from claimflow.infrastructure.web.responses import envelope


router = APIRouter()

Container = Annotated[ServiceContainer, Depends(get_container)]
DbSession = Annotated[Session, Depends(get_db)]


@router.post("/upload", status_code=status.HTTP_201_CREATED, dependencies=[Depends(upload_rate_limit)])
async def upload_file(
    current_user: CurrentUser,
    container: Container,
    db: DbSession,
    file: UploadFile = File(...)
) -> Dict[str, Any]:
    """
    Upload a claim document.

    - **file**: Allowed extensions and maximum size come from settings
    """
    storage = container.storage
    # Read one byte past the limit so oversized uploads are rejected without buffering them whole
    content = await file.read(storage.max_size_bytes + 1)
    if len(content) > storage.max_size_bytes:
        raise ValidationError(
            f"File exceeds maximum size of {container.settings.max_upload_size_mb}MB",
            "file"
        )

    stored = await UploadFileUseCase(db, storage).execute(
        current_user, file.filename, file.content_type, content
    )
    return envelope(stored, message="File uploaded successfully")


@router.get("/{file_id}")
async def get_file(file_id: str, current_user: CurrentUser, db: DbSession) -> Dict[str, Any]:
    """Get file metadata."""
    stored = await GetFileUseCase(db).execute(current_user, file_id)
    return envelope(stored)


@router.get("/{file_id}/download")
async def download_file(
    file_id: str,
    current_user: CurrentUser,
    container: Container,
    db: DbSession
) -> FileResponse:
    """Download file content."""
    path, stored = await DownloadFileUseCase(db, container.storage).execute(current_user, file_id)
    return FileResponse(
        path,
        media_type=stored.content_type or "application/octet-stream",
        filename=stored.original_name
    )


@router.delete("/{file_id}")
async def delete_file(
    file_id: str,
    current_user: CurrentUser,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    await DeleteFileUseCase(db, container.storage).execute(current_user, file_id)
    return envelope(message="File deleted successfully")
