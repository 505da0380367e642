"""
Stored file metadata repository using SQLAlchemy.
"""

from typing import Optional

from sqlalchemy.orm import Session

from claimflow.infrastructure.db.models import StoredFileModel


class SQLAlchemyFileRepository:
    """SQLAlchemy implementation of stored file repository."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        organization_id: str,
        uploaded_by: str,
        original_name: str,
        content_type: Optional[str],
        size_bytes: int,
        storage_path: str
    ) -> StoredFileModel:
        model = StoredFileModel(
            organization_id=organization_id,
            uploaded_by=uploaded_by,
            original_name=original_name,
            content_type=content_type,
            size_bytes=size_bytes,
            storage_path=storage_path,
        )
        self.session.add(model)
        self.session.flush()
        return model

    def get_by_id(self, file_id: str, organization_id: str) -> Optional[StoredFileModel]:
        return self.session.query(StoredFileModel).filter_by(
            id=file_id,
            organization_id=organization_id
        ).first()

    def delete(self, model: StoredFileModel) -> None:
        self.session.delete(model)
        self.session.flush()
