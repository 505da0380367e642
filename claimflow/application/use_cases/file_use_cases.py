"""
File upload use cases.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from claimflow.application.dto.file_dto import FileResponseDTO
from claimflow.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from claimflow.domain.models.base import EntityNotFoundError
from claimflow.domain.models.user import AuthContext
from claimflow.infrastructure.db.models import StoredFileModel
from claimflow.infrastructure.repositories.file_repository import SQLAlchemyFileRepository
from claimflow.infrastructure.storage.storage_service import StorageService

logger = logging.getLogger(__name__)


def _get_file_or_404(repository: SQLAlchemyFileRepository, file_id: str, organization_id: str) -> StoredFileModel:
    stored = repository.get_by_id(file_id, organization_id)
    if not stored:
        raise EntityNotFoundError("File", file_id)
    return stored


class UploadFileUseCase(CommandUseCase):
    """Validate, store and record an uploaded document."""

    def __init__(self, session, storage: StorageService):
        super().__init__(session)
        self.storage = storage

    async def _execute(
        self,
        current_user: AuthContext,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes
    ) -> FileResponseDTO:
        saved = self.storage.save(current_user.organization_id, filename, content)

        try:
            stored = SQLAlchemyFileRepository(self.session).create(
                organization_id=current_user.organization_id,
                uploaded_by=current_user.id,
                original_name=filename,
                content_type=content_type,
                size_bytes=saved["size_bytes"],
                storage_path=saved["storage_path"],
            )
            self.commit()
        except Exception:
            # Do not leave orphaned content behind
            self.storage.delete(saved["storage_path"])
            raise

        return FileResponseDTO.model_validate(stored)


class GetFileUseCase(QueryUseCase):

    async def _execute(self, current_user: AuthContext, file_id: str) -> FileResponseDTO:
        stored = _get_file_or_404(SQLAlchemyFileRepository(self.session), file_id, current_user.organization_id)
        return FileResponseDTO.model_validate(stored)


class DownloadFileUseCase(QueryUseCase):
    """Resolve a stored file to its path on disk and its original name."""

    def __init__(self, session, storage: StorageService):
        super().__init__(session)
        self.storage = storage

    async def _execute(self, current_user: AuthContext, file_id: str) -> Tuple[Path, StoredFileModel]:
        stored = _get_file_or_404(SQLAlchemyFileRepository(self.session), file_id, current_user.organization_id)
        path = self.storage.resolve(stored.storage_path)
        if not path.exists():
            raise EntityNotFoundError("File", file_id)
        return path, stored


class DeleteFileUseCase(CommandUseCase):

    def __init__(self, session, storage: StorageService):
        super().__init__(session)
        self.storage = storage

    async def _execute(self, current_user: AuthContext, file_id: str) -> None:
        repository = SQLAlchemyFileRepository(self.session)
        stored = _get_file_or_404(repository, file_id, current_user.organization_id)
        storage_path = stored.storage_path
        repository.delete(stored)
        self.commit()
        self.storage.delete(storage_path)
