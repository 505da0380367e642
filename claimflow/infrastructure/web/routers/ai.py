"""
Denial analysis router.
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from claimflow.application.dto.ai_dto import BatchAnalyzeRequestDTO, AppealLetterRequestDTO
from claimflow.application.use_cases.ai_use_cases import (
    ClaimAnalyzer, AnalyzeClaimUseCase, StartBatchAnalysisUseCase,
    GetJobUseCase, GenerateAppealLetterUseCase
)
from claimflow.infrastructure.auth.dependencies import CurrentUser, ManagerUser
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.rate_limiting.dependencies import ai_rate_limit
from claimflow.infrastructure.web.responses import envelope


router = APIRouter(dependencies=[Depends(ai_rate_limit)])

Container = Annotated[ServiceContainer, Depends(get_container)]
DbSession = Annotated[Session, Depends(get_db)]


def get_claim_analyzer(container: Container) -> ClaimAnalyzer:
    return ClaimAnalyzer(container.analyzer, container.cache, container.settings.ai_cache_ttl_seconds)


@router.post("/analyze/{claim_id}")
async def analyze_claim(
    claim_id: str,
    current_user: CurrentUser,
    claim_analyzer: Annotated[ClaimAnalyzer, Depends(get_claim_analyzer)],
    db: DbSession
) -> Dict[str, Any]:
    """Analyze a claim's denial and store the recommendation on the claim."""
    analysis = await AnalyzeClaimUseCase(db, claim_analyzer).execute(current_user, claim_id)
    return envelope(analysis)


@router.post("/batch-analyze", status_code=status.HTTP_202_ACCEPTED)
async def batch_analyze(
    request: BatchAnalyzeRequestDTO,
    current_user: ManagerUser,
    container: Container
) -> Dict[str, Any]:
    """
    Queue analysis of several claims (admins and managers).

    - **claimIds**: Non-empty list of claim ids
    """
    job = await StartBatchAnalysisUseCase(container.job_queue).execute(current_user, request)
    return envelope(
        job,
        message=f"Batch analysis started for {len(request.claim_ids)} claims"
    )


@router.get("/jobs/{job_id}")
async def get_job(job_id: str, current_user: CurrentUser, container: Container) -> Dict[str, Any]:
    """Status of a background job of the caller's organization."""
    job = await GetJobUseCase(container.job_queue).execute(current_user, job_id)
    return envelope(job)


@router.post("/appeal-letter/{claim_id}")
async def generate_appeal_letter(
    claim_id: str,
    current_user: CurrentUser,
    container: Container,
    db: DbSession,
    request: Annotated[Optional[AppealLetterRequestDTO], Body()] = None
) -> Dict[str, Any]:
    """
    Generate an appeal letter for a claim.

    - **appealType**: ``first`` (default) or ``second``
    """
    letter = await GenerateAppealLetterUseCase(db, container.analyzer).execute(
        current_user, claim_id, request or AppealLetterRequestDTO()
    )
    return envelope(letter)
