"""
Claim use cases.
Reads are cache-aside; every write invalidates the organization's claim cache.
"""

import logging
from typing import Any, Dict, List, Tuple

from claimflow.application.dto.base_dto import PaginationMetaDTO
from claimflow.application.dto.claim_dto import (
    CreateClaimRequestDTO, UpdateClaimRequestDTO, AssignClaimRequestDTO,
    ListClaimsRequestDTO, ClaimResponseDTO, ClaimDetailResponseDTO, ClaimActionResponseDTO
)
from claimflow.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from claimflow.application.use_cases.notification_use_cases import NotificationPublisher
from claimflow.domain.models.base import EntityNotFoundError, ValidationError
from claimflow.domain.models.claim import ClaimActionType, ClaimStatus
from claimflow.domain.models.user import AuthContext
from claimflow.infrastructure.cache.cache_service import CacheService, ClaimCacheKeys
from claimflow.infrastructure.db.models import ClaimModel, utcnow
from claimflow.infrastructure.realtime.hub import NotificationHub
from claimflow.infrastructure.repositories.claim_repository import SQLAlchemyClaimRepository
from claimflow.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = ("status", "priority")


def get_claim_or_404(repository: SQLAlchemyClaimRepository, claim_id: str, organization_id: str) -> ClaimModel:
    claim = repository.get_by_id(claim_id, organization_id)
    if not claim:
        raise EntityNotFoundError("Claim", claim_id)
    return claim


async def invalidate_claims(cache: CacheService, organization_id: str) -> None:
    removed = await cache.invalidate_pattern(ClaimCacheKeys.prefix(organization_id))
    logger.debug(f"Invalidated {removed} cached claim entries for organization {organization_id}")


class ListClaimsUseCase(QueryUseCase):
    """List the organization's claims; results are cached per filter set."""

    def __init__(self, session, cache: CacheService):
        super().__init__(session)
        self.cache = cache

    async def _execute(
        self,
        current_user: AuthContext,
        request: ListClaimsRequestDTO
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        organization_id = current_user.organization_id
        cache_key = ClaimCacheKeys.list_key(organization_id, request.cache_filters())

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached["data"], cached["meta"]

        claims, total = SQLAlchemyClaimRepository(self.session).list(
            organization_id,
            status=request.status,
            priority=request.priority,
            assigned_to=request.assigned_to,
            search=request.search,
            date_from=request.date_from,
            date_to=request.date_to,
            offset=request.offset,
            limit=request.limit,
        )
        data = [ClaimResponseDTO.model_validate(claim).to_json_dict() for claim in claims]
        meta = PaginationMetaDTO.create(total, request.page, request.limit).to_json_dict()

        await self.cache.set(cache_key, {"data": data, "meta": meta})
        return data, meta


class GetClaimUseCase(QueryUseCase):
    """Claim detail with its recent history."""

    def __init__(self, session, cache: CacheService):
        super().__init__(session)
        self.cache = cache

    async def _execute(self, current_user: AuthContext, claim_id: str) -> Dict[str, Any]:
        organization_id = current_user.organization_id
        cache_key = ClaimCacheKeys.detail_key(organization_id, claim_id)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        repository = SQLAlchemyClaimRepository(self.session)
        claim = get_claim_or_404(repository, claim_id, organization_id)
        detail = ClaimDetailResponseDTO(
            **ClaimResponseDTO.model_validate(claim).model_dump(),
            actions=[ClaimActionResponseDTO.model_validate(a) for a in repository.recent_actions(claim.id)],
        ).to_json_dict()

        await self.cache.set(cache_key, detail)
        return detail


class CreateClaimUseCase(CommandUseCase):

    def __init__(self, session, cache: CacheService):
        super().__init__(session)
        self.cache = cache

    async def _execute(self, current_user: AuthContext, request: CreateClaimRequestDTO) -> ClaimResponseDTO:
        repository = SQLAlchemyClaimRepository(self.session)
        claim = repository.create(current_user.organization_id, request.model_dump())
        repository.add_action(
            claim.id,
            current_user.id,
            ClaimActionType.CREATED.value,
            f"Claim {claim.claim_number} created",
        )
        self.commit()
        await invalidate_claims(self.cache, current_user.organization_id)

        logger.info(f"Claim {claim.id} created by user {current_user.id}")
        return ClaimResponseDTO.model_validate(claim)


class UpdateClaimUseCase(CommandUseCase):
    """Apply a partial update; status transitions get their own history entry."""

    def __init__(self, session, cache: CacheService):
        super().__init__(session)
        self.cache = cache

    async def _execute(
        self,
        current_user: AuthContext,
        claim_id: str,
        request: UpdateClaimRequestDTO
    ) -> ClaimResponseDTO:
        repository = SQLAlchemyClaimRepository(self.session)
        claim = get_claim_or_404(repository, claim_id, current_user.organization_id)

        changes = {
            field: value for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None or field not in NON_NULLABLE_FIELDS
        }
        if not changes:
            raise ValidationError("No fields to update")

        previous_status = ClaimStatus(claim.status)
        for field, value in changes.items():
            setattr(claim, field, value)

        new_status = ClaimStatus(claim.status)
        if new_status != previous_status:
            repository.add_action(
                claim.id,
                current_user.id,
                ClaimActionType.STATUS_CHANGE.value,
                f"Status changed from {previous_status.value} to {new_status.value}",
            )
        else:
            repository.add_action(
                claim.id,
                current_user.id,
                ClaimActionType.UPDATED.value,
                f"Updated {', '.join(sorted(changes))}",
            )

        self.commit()
        await invalidate_claims(self.cache, current_user.organization_id)
        return ClaimResponseDTO.model_validate(claim)


class AssignClaimUseCase(CommandUseCase):
    """Assign a claim to a teammate and notify them."""

    def __init__(self, session, cache: CacheService, hub: NotificationHub):
        super().__init__(session)
        self.cache = cache
        self.notifications = NotificationPublisher(session, hub)

    async def _execute(
        self,
        current_user: AuthContext,
        claim_id: str,
        request: AssignClaimRequestDTO
    ) -> ClaimResponseDTO:
        organization_id = current_user.organization_id
        repository = SQLAlchemyClaimRepository(self.session)
        claim = get_claim_or_404(repository, claim_id, organization_id)

        assignee = SQLAlchemyUserRepository(self.session).get_in_organization(request.user_id, organization_id)
        if not assignee or not assignee.is_active:
            raise ValidationError("Assignee must be an active user of your organization", "userId")

        claim.assigned_to = assignee.id
        claim.assigned_at = utcnow()
        repository.add_action(
            claim.id,
            current_user.id,
            ClaimActionType.ASSIGNED.value,
            f"Assigned to user {assignee.id}",
        )
        self.notifications.create(
            user_id=assignee.id,
            organization_id=organization_id,
            title="New Claim Assigned",
            message=f"Claim {claim.claim_number} has been assigned to you",
            related_claim_id=claim.id,
            action_url=f"/claims/{claim.id}",
        )
        self.commit()

        await invalidate_claims(self.cache, organization_id)
        await self.notifications.flush()
        return ClaimResponseDTO.model_validate(claim)
