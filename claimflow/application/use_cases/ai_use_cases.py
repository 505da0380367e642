"""
Denial analysis use cases and the batch-analysis job handler.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from claimflow.application.dto.ai_dto import (
    BatchAnalyzeRequestDTO, AppealLetterRequestDTO,
    DenialAnalysisResponseDTO, AppealLetterResponseDTO, JobResponseDTO
)
from claimflow.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from claimflow.application.use_cases.claim_use_cases import get_claim_or_404, invalidate_claims
from claimflow.domain.models.base import EntityNotFoundError, ValidationError
from claimflow.domain.models.claim import ClaimActionType, DenialAnalysis
from claimflow.domain.models.user import AuthContext
from claimflow.domain.services.denial_analysis import DenialAnalysisService
from claimflow.infrastructure.cache.cache_service import CacheService, denial_analysis_key
from claimflow.infrastructure.db.database import Database
from claimflow.infrastructure.db.models import ClaimModel, utcnow
from claimflow.infrastructure.jobs.queue import JobQueue
from claimflow.infrastructure.repositories.claim_repository import SQLAlchemyClaimRepository

logger = logging.getLogger(__name__)

BATCH_ANALYSIS_JOB = "batch-analysis"


class ClaimAnalyzer:
    """Runs the denial analysis for a claim and records the outcome on it."""

    def __init__(self, analyzer: DenialAnalysisService, cache: CacheService, ttl_seconds: int = 86400):
        self.analyzer = analyzer
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def analyze(self, claim: ClaimModel) -> DenialAnalysis:
        """Analysis for the claim's denial code, cached per code and payer."""
        code = self.analyzer.normalize_code(claim.denial_code)
        cache_key = denial_analysis_key(code, claim.payer_id)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return DenialAnalysis.from_dict(cached)

        analysis = self.analyzer.analyze(code)
        await self.cache.set(cache_key, analysis.to_dict(), self.ttl_seconds)
        return analysis

    def apply(
        self,
        repository: SQLAlchemyClaimRepository,
        claim: ClaimModel,
        analysis: DenialAnalysis,
        user_id: Optional[str]
    ) -> None:
        claim.ai_recommended_action = analysis.recommended_action
        claim.ai_confidence_score = analysis.confidence
        claim.ai_analyzed_at = utcnow()
        claim.priority = analysis.priority
        repository.add_action(
            claim.id,
            user_id,
            ClaimActionType.AI_ANALYSIS.value,
            f"Denial analysis: {analysis.recommended_action}",
        )


class AnalyzeClaimUseCase(CommandUseCase):
    """Analyze one claim and write the recommendation back to it."""

    def __init__(self, session, claim_analyzer: ClaimAnalyzer):
        super().__init__(session)
        self.claim_analyzer = claim_analyzer

    async def _execute(self, current_user: AuthContext, claim_id: str) -> DenialAnalysisResponseDTO:
        repository = SQLAlchemyClaimRepository(self.session)
        claim = get_claim_or_404(repository, claim_id, current_user.organization_id)

        analysis = await self.claim_analyzer.analyze(claim)
        self.claim_analyzer.apply(repository, claim, analysis, current_user.id)
        self.commit()

        await invalidate_claims(self.claim_analyzer.cache, current_user.organization_id)
        return DenialAnalysisResponseDTO.from_domain(analysis)


class StartBatchAnalysisUseCase:
    """Queue a batch analysis job for the caller's organization."""

    def __init__(self, queue: JobQueue):
        self.queue = queue

    async def execute(self, current_user: AuthContext, request: BatchAnalyzeRequestDTO) -> JobResponseDTO:
        claim_ids = [claim_id for claim_id in (request.claim_ids or []) if claim_id]
        if not claim_ids:
            raise ValidationError("claimIds must be a non-empty array", "claimIds")

        # Deduplicate while keeping the caller's order
        claim_ids = list(dict.fromkeys(claim_ids))
        job = self.queue.enqueue(
            BATCH_ANALYSIS_JOB,
            {"organization_id": current_user.organization_id, "claim_ids": claim_ids},
            organization_id=current_user.organization_id,
        )
        return JobResponseDTO.model_validate(job)


class GetJobUseCase:
    """Status of a background job owned by the caller's organization."""

    def __init__(self, queue: JobQueue):
        self.queue = queue

    async def execute(self, current_user: AuthContext, job_id: str) -> JobResponseDTO:
        job = self.queue.get(job_id)
        if not job or job.organization_id != current_user.organization_id:
            raise EntityNotFoundError("Job", job_id)
        return JobResponseDTO.model_validate(job)


class GenerateAppealLetterUseCase(QueryUseCase):

    def __init__(self, session, analyzer: DenialAnalysisService):
        super().__init__(session)
        self.analyzer = analyzer

    async def _execute(
        self,
        current_user: AuthContext,
        claim_id: str,
        request: AppealLetterRequestDTO
    ) -> AppealLetterResponseDTO:
        claim = get_claim_or_404(SQLAlchemyClaimRepository(self.session), claim_id, current_user.organization_id)
        letter = self.analyzer.appeal_letter(
            claim_number=claim.claim_number,
            patient_name=claim.patient_name,
            date_of_service=claim.date_of_service,
            denial_code=claim.denial_code,
            denial_reason=claim.denial_reason,
            amount=claim.total_charge,
            services=list(claim.cpt_codes or []),
            appeal_type=request.appeal_type,
        )
        return AppealLetterResponseDTO(letter=letter)


class BatchAnalysisHandler:
    """
    Job handler for ``batch-analysis``.
    Each claim is analyzed in its own transaction; one failing claim does not
    stop the rest of the batch.
    """

    def __init__(self, database: Database, claim_analyzer: ClaimAnalyzer):
        self.database = database
        self.claim_analyzer = claim_analyzer

    async def __call__(self, payload: Dict[str, Any]) -> Dict[str, int]:
        organization_id = payload["organization_id"]
        claim_ids: List[str] = list(payload.get("claim_ids") or [])

        processed = 0
        skipped = 0
        for claim_id in claim_ids:
            # Database calls are synchronous; let requests run between claims
            await asyncio.sleep(0)
            try:
                with self.database.session_scope() as session:
                    repository = SQLAlchemyClaimRepository(session)
                    claim = repository.get_by_id(claim_id, organization_id)
                    if claim is None:
                        logger.warning(f"Batch analysis skipped unknown claim {claim_id}")
                        skipped += 1
                        continue
                    analysis = await self.claim_analyzer.analyze(claim)
                    self.claim_analyzer.apply(repository, claim, analysis, None)
                processed += 1
            except Exception as e:
                logger.error(f"Batch analysis failed for claim {claim_id}: {e}", exc_info=True)
                skipped += 1

        if processed:
            await invalidate_claims(self.claim_analyzer.cache, organization_id)

        logger.info(f"Batch analysis for organization {organization_id}: {processed} processed, {skipped} skipped")
        return {"processed": processed, "skipped": skipped}
