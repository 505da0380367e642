"""
Claim management router.
Work queue listing, claim CRUD and assignment.
"""

from datetime import date
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from claimflow.application.dto.claim_dto import (
    CreateClaimRequestDTO, UpdateClaimRequestDTO, AssignClaimRequestDTO, ListClaimsRequestDTO
)
from claimflow.application.use_cases.claim_use_cases import (
    ListClaimsUseCase, GetClaimUseCase, CreateClaimUseCase, UpdateClaimUseCase, AssignClaimUseCase
)
from claimflow.domain.models.claim import ClaimStatus, ClaimPriority
from claimflow.infrastructure.auth.dependencies import CurrentUser
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.web.params import parse_query
from claimflow.infrastructure.web.responses import envelope


router = APIRouter()

Container = Annotated[ServiceContainer, Depends(get_container)]
DbSession = Annotated[Session, Depends(get_db)]


def list_claims_params(
    page: int = Query(1, description="Page number (1-based)"),
    limit: int = Query(20, description="Items per page (max 100)"),
    status: Optional[ClaimStatus] = Query(None, description="Filter by status"),
    priority: Optional[ClaimPriority] = Query(None, description="Filter by priority"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo", description="Filter by assignee"),
    search: Optional[str] = Query(None, description="Search claim number, patient or denial reason"),
    date_from: Optional[date] = Query(None, alias="dateFrom", description="Date of service from"),
    date_to: Optional[date] = Query(None, alias="dateTo", description="Date of service to"),
) -> ListClaimsRequestDTO:
    """Dependency to parse and validate claim list filters."""
    return parse_query(
        ListClaimsRequestDTO,
        page=page,
        limit=limit,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("")
async def list_claims(
    current_user: CurrentUser,
    params: Annotated[ListClaimsRequestDTO, Depends(list_claims_params)],
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """
    List the organization's claims, newest first.

    - **page** / **limit**: Pagination (limit at most 100)
    - **status** / **priority** / **assignedTo**: Exact filters
    - **search**: Case-insensitive match on claim number, patient name or denial reason
    - **dateFrom** / **dateTo**: Date of service window
    """
    claims, meta = await ListClaimsUseCase(db, container.cache).execute(current_user, params)
    return envelope(claims, meta=meta)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_claim(
    request: CreateClaimRequestDTO,
    current_user: CurrentUser,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """Create a denied claim in the caller's organization."""
    claim = await CreateClaimUseCase(db, container.cache).execute(current_user, request)
    return envelope(claim, message="Claim created successfully")


@router.get("/{claim_id}")
async def get_claim(
    claim_id: str,
    current_user: CurrentUser,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """Get a claim with its recent history."""
    claim = await GetClaimUseCase(db, container.cache).execute(current_user, claim_id)
    return envelope(claim)


@router.put("/{claim_id}")
async def update_claim(
    claim_id: str,
    request: UpdateClaimRequestDTO,
    current_user: CurrentUser,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """Update status, priority or denial details of a claim."""
    claim = await UpdateClaimUseCase(db, container.cache).execute(current_user, claim_id, request)
    return envelope(claim, message="Claim updated successfully")


@router.post("/{claim_id}/assign")
async def assign_claim(
    claim_id: str,
    request: AssignClaimRequestDTO,
    current_user: CurrentUser,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """Assign a claim to an active user of the same organization and notify them."""
    claim = await AssignClaimUseCase(db, container.cache, container.hub).execute(current_user, claim_id, request)
    return envelope(claim, message="Claim assigned successfully")
