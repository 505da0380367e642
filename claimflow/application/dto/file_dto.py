"""
Stored file DTOs.
"""

from typing import Optional
from datetime import datetime

from .base_dto import ResponseDTO


class FileResponseDTO(ResponseDTO):
    id: str
    original_name: str
    content_type: Optional[str] = None
    size_bytes: int
    uploaded_by: str
    created_at: datetime
