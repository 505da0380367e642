"""
Unit tests for use case plumbing and role authorization.
"""

import pytest
from unittest.mock import Mock

from claimflow.application.use_cases.ai_use_cases import ClaimAnalyzer
from claimflow.application.use_cases.base_use_case import CommandUseCase
from claimflow.domain.models.base import ForbiddenError, UnauthorizedError
from claimflow.domain.models.user import AuthContext, UserRole
from claimflow.domain.services.denial_analysis import DenialAnalysisService
from claimflow.infrastructure.auth.dependencies import authorize, require_roles
from claimflow.infrastructure.cache.cache_service import CacheService, denial_analysis_key
from claimflow.infrastructure.cache.store import InMemoryKeyValueStore


class FailingUseCase(CommandUseCase):
    async def _execute(self):
        raise RuntimeError("write failed")


class SavingUseCase(CommandUseCase):
    async def _execute(self, value):
        self.commit()
        return value * 2


class TestCommandUseCase:
    """Test cases for the unit-of-work wrapper."""

    @pytest.mark.asyncio
    async def test_rollback_on_error(self):
        """Test the session is rolled back and the error re-raised."""
        session = Mock()

        with pytest.raises(RuntimeError):
            await FailingUseCase(session).execute()

        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_on_success(self):
        session = Mock()

        assert await SavingUseCase(session).execute(21) == 42

        session.commit.assert_called_once()
        session.rollback.assert_not_called()


def make_context(role: UserRole) -> AuthContext:
    return AuthContext(id="u1", email="u1@clinic.com", role=role, organization_id="org-1", token="t")


class TestAuthorize:
    """Test cases for role authorization."""

    def test_allowed_role(self):
        context = make_context(UserRole.MANAGER)

        assert authorize(context, [UserRole.ADMIN, UserRole.MANAGER]) is context

    def test_missing_context(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            authorize(None, [UserRole.ADMIN])

        assert exc_info.value.message == "Not authenticated"

    def test_wrong_role(self):
        with pytest.raises(ForbiddenError) as exc_info:
            authorize(make_context(UserRole.BILLER), [UserRole.ADMIN])

        assert exc_info.value.message == "Insufficient permissions"

    @pytest.mark.asyncio
    async def test_role_checker_dependency(self):
        checker = require_roles(UserRole.ADMIN)

        assert await checker(make_context(UserRole.ADMIN))
        with pytest.raises(ForbiddenError):
            await checker(make_context(UserRole.APPEALS_SPECIALIST))


class TestClaimAnalyzer:
    """Test cases for the cached claim analysis."""

    @pytest.mark.asyncio
    async def test_analysis_is_cached_per_code_and_payer(self):
        store = InMemoryKeyValueStore()
        service = DenialAnalysisService()
        analyzer = ClaimAnalyzer(service, CacheService(store))
        claim = Mock(denial_code="co-16", payer_id="PAYER-1")

        first = await analyzer.analyze(claim)

        assert await store.exists(denial_analysis_key("CO-16", "PAYER-1"))
        service.analyze = Mock(side_effect=AssertionError("cache should answer"))
        assert await analyzer.analyze(claim) == first
