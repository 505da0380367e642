"""
Local disk storage for uploaded claim documents.
"""

import hashlib
import logging
import uuid
from pathlib import Path
from typing import Dict, Any, List, Optional

from claimflow.domain.models.base import ValidationError

logger = logging.getLogger(__name__)


class StorageService:
    """Stores uploaded files under ``<root>/<organization_id>/``."""

    def __init__(self, root: str, max_size_bytes: int, allowed_extensions: List[str]):
        self.root = Path(root)
        self.max_size_bytes = max_size_bytes
        self.allowed_extensions = [ext.lower() for ext in allowed_extensions]

    def validate(self, filename: Optional[str], size: int) -> str:
        """
        Validate an upload and return its normalized extension.

        Raises:
            ValidationError: Missing name, disallowed extension, empty or oversized file
        """
        if not filename:
            raise ValidationError("File name is required", "file")

        extension = Path(filename).suffix.lower()
        if extension not in self.allowed_extensions:
            raise ValidationError(
                f"File type {extension or '(none)'} is not allowed. "
                f"Allowed: {', '.join(self.allowed_extensions)}",
                "file"
            )

        if size == 0:
            raise ValidationError("File is empty", "file")
        if size > self.max_size_bytes:
            raise ValidationError(
                f"File exceeds maximum size of {self.max_size_bytes // (1024 * 1024)}MB",
                "file"
            )
        return extension

    def save(self, organization_id: str, filename: str, content: bytes) -> Dict[str, Any]:
        """
        Persist file content.

        Returns:
            Dict with storage_path (relative to the root), size_bytes and sha256
        """
        extension = self.validate(filename, len(content))

        folder = self.root / organization_id
        folder.mkdir(parents=True, exist_ok=True)

        stored_name = f"{uuid.uuid4().hex}{extension}"
        (folder / stored_name).write_bytes(content)
        logger.info(f"Stored upload {filename} as {organization_id}/{stored_name}")

        return {
            "storage_path": f"{organization_id}/{stored_name}",
            "size_bytes": len(content),
            "sha256": hashlib.sha256(content).hexdigest(),
        }

    def resolve(self, storage_path: str) -> Path:
        """Absolute path of a stored file; refuses paths escaping the root."""
        path = (self.root / storage_path).resolve()
        if self.root.resolve() not in path.parents:
            raise ValidationError("Invalid storage path", "storage_path")
        return path

    def delete(self, storage_path: str) -> bool:
        """Remove stored content; returns False when it was already gone."""
        path = self.resolve(storage_path)
        if not path.exists():
            logger.warning(f"Stored file {storage_path} missing on delete")
            return False
        path.unlink()
        return True
