"""
Service container.
Every shared service is built once per application and stored on ``app.state``;
request dependencies resolve services from here instead of module globals.
"""

import logging
from typing import Optional

from starlette.requests import HTTPConnection

from claimflow.config import Settings
from claimflow.domain.services.denial_analysis import DenialAnalysisService
from claimflow.infrastructure.auth.authenticator import Authenticator
from claimflow.infrastructure.auth.passwords import PasswordHasher
from claimflow.infrastructure.auth.revocation import RevocationList
from claimflow.infrastructure.auth.token_codec import TokenCodec
from claimflow.infrastructure.cache.cache_service import CacheService
from claimflow.infrastructure.cache.store import KeyValueStore, create_key_value_store
from claimflow.infrastructure.db.database import Database
from claimflow.infrastructure.jobs.queue import JobQueue
from claimflow.infrastructure.jobs.worker import JobWorker
from claimflow.infrastructure.rate_limiting.limiter import RateLimiter, build_rate_limits
from claimflow.infrastructure.realtime.hub import NotificationHub
from claimflow.infrastructure.storage.storage_service import StorageService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Explicitly constructed services for one application instance."""

    def __init__(
        self,
        settings: Settings,
        database: Optional[Database] = None,
        store: Optional[KeyValueStore] = None
    ):
        self.settings = settings
        self.database = database or Database(settings.effective_database_url, echo=settings.database_echo)
        self.store = store or create_key_value_store(settings.redis_url)

        self.cache = CacheService(self.store, default_ttl=settings.cache_ttl_seconds)
        self.revocations = RevocationList(self.store)
        self.rate_limiter = RateLimiter(
            self.store,
            build_rate_limits(settings),
            enabled=settings.rate_limit_enabled,
            fail_open=settings.rate_limit_fail_open,
        )

        self.tokens = TokenCodec(settings)
        self.passwords = PasswordHasher(rounds=settings.bcrypt_rounds)
        self.authenticator = Authenticator(self.tokens, self.revocations)

        self.hub = NotificationHub()
        self.analyzer = DenialAnalysisService()
        self.storage = StorageService(
            settings.upload_dir,
            settings.max_upload_size_bytes,
            settings.allowed_upload_extensions,
        )

        self.job_queue = JobQueue(
            self.database,
            max_attempts=settings.job_max_attempts,
            backoff_base_seconds=settings.job_backoff_base_seconds,
            stale_after_seconds=settings.job_stale_after_seconds,
        )
        self.worker = JobWorker(self.job_queue, poll_interval=settings.job_poll_interval_seconds)

    async def close(self) -> None:
        """Release external resources."""
        await self.worker.stop()
        try:
            await self.store.close()
        except Exception as e:
            logger.warning(f"Error closing key-value store: {e}")
        self.database.dispose()


def get_container(connection: HTTPConnection) -> ServiceContainer:
    """Dependency returning the container of the running application."""
    return connection.app.state.container
