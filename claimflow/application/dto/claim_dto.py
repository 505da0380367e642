"""
Claim DTOs for the application layer.
"""

from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, field_validator

from claimflow.domain.models.claim import ClaimStatus, ClaimPriority
from .base_dto import RequestDTO, ResponseDTO, ListRequestDTO, DateRangeMixin


def _normalize_code(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip().upper()
    return v or None


# Request DTOs
class CreateClaimRequestDTO(RequestDTO):
    """DTO for claim creation requests."""

    claim_number: str = Field(min_length=1, max_length=100)
    patient_name: Optional[str] = Field(default=None, max_length=255)
    payer_id: Optional[str] = Field(default=None, max_length=100)
    payer_name: Optional[str] = Field(default=None, max_length=255)
    date_of_service: date
    total_charge: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    cpt_codes: List[str] = Field(default_factory=list, max_length=50)
    denial_code: Optional[str] = Field(default=None, max_length=20)
    denial_reason: Optional[str] = Field(default=None, max_length=2000)
    priority: ClaimPriority = ClaimPriority.MEDIUM

    @field_validator('denial_code')
    @classmethod
    def normalize_denial_code(cls, v):
        return _normalize_code(v)

    @field_validator('cpt_codes')
    @classmethod
    def validate_cpt_codes(cls, v):
        codes = [code.strip().upper() for code in v if code and code.strip()]
        for code in codes:
            if len(code) > 10:
                raise ValueError(f'Invalid CPT code: {code}')
        return codes


class UpdateClaimRequestDTO(RequestDTO):
    """DTO for claim update requests. Only provided fields change."""

    status: Optional[ClaimStatus] = None
    priority: Optional[ClaimPriority] = None
    patient_name: Optional[str] = Field(default=None, max_length=255)
    payer_name: Optional[str] = Field(default=None, max_length=255)
    denial_code: Optional[str] = Field(default=None, max_length=20)
    denial_reason: Optional[str] = Field(default=None, max_length=2000)

    @field_validator('denial_code')
    @classmethod
    def normalize_denial_code(cls, v):
        return _normalize_code(v)


class AssignClaimRequestDTO(RequestDTO):
    user_id: str = Field(min_length=1, max_length=36)


class ListClaimsRequestDTO(DateRangeMixin, ListRequestDTO):
    """Filters for the claim work queue."""

    status: Optional[ClaimStatus] = None
    priority: Optional[ClaimPriority] = None
    assigned_to: Optional[str] = None
    search: Optional[str] = Field(default=None, max_length=255)

    def cache_filters(self) -> dict:
        """Canonical filter dict used in the list cache key."""
        return self.model_dump(mode="json", exclude_none=True)


# Response DTOs
class ClaimActionResponseDTO(ResponseDTO):
    id: str
    user_id: Optional[str] = None
    action_type: str
    description: Optional[str] = None
    created_at: datetime


class ClaimResponseDTO(ResponseDTO):
    """DTO for claim responses."""

    id: str
    organization_id: str
    claim_number: str
    patient_name: Optional[str] = None
    payer_id: Optional[str] = None
    payer_name: Optional[str] = None
    date_of_service: date
    total_charge: float
    cpt_codes: List[str] = Field(default_factory=list)
    denial_code: Optional[str] = None
    denial_reason: Optional[str] = None
    status: ClaimStatus
    priority: ClaimPriority
    assigned_to: Optional[str] = None
    assigned_at: Optional[datetime] = None
    ai_recommended_action: Optional[str] = None
    ai_confidence_score: Optional[float] = None
    ai_analyzed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ClaimDetailResponseDTO(ClaimResponseDTO):
    """Claim with its most recent history entries."""

    actions: List[ClaimActionResponseDTO] = Field(default_factory=list)
