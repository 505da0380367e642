"""
Denial analysis and background job DTOs.
"""

from typing import Any, List, Literal, Optional
from datetime import datetime

from pydantic import Field

from claimflow.domain.models.claim import ClaimPriority, DenialAnalysis
from claimflow.domain.models.notification import JobStatus
from .base_dto import RequestDTO, ResponseDTO


class BatchAnalyzeRequestDTO(RequestDTO):
    # Emptiness is checked by the use case so the error message is stable
    claim_ids: Optional[List[str]] = None


class AppealLetterRequestDTO(RequestDTO):
    appeal_type: Literal["first", "second"] = "first"


class DenialAnalysisResponseDTO(ResponseDTO):
    denial_code: str
    reason: str
    recommended_action: str
    priority: ClaimPriority
    confidence: float
    required_documentation: List[str] = Field(default_factory=list)
    appeal_strategy: str

    @classmethod
    def from_domain(cls, analysis: DenialAnalysis) -> "DenialAnalysisResponseDTO":
        return cls(**analysis.to_dict())


class AppealLetterResponseDTO(ResponseDTO):
    letter: str


class JobResponseDTO(ResponseDTO):
    id: str
    name: str
    status: JobStatus
    attempts: int
    max_attempts: int
    last_error: Optional[str] = None
    result: Optional[Any] = None
    run_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
