"""
Durable job queue stored in the relational database.
Jobs survive restarts; delivery is at-least-once.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from claimflow.domain.models.notification import JobStatus
from claimflow.infrastructure.db.database import Database
from claimflow.infrastructure.db.models import BackgroundJobModel, utcnow

logger = logging.getLogger(__name__)


class JobQueue:
    """Enqueue, claim and settle background jobs."""

    def __init__(
        self,
        database: Database,
        max_attempts: int = 3,
        backoff_base_seconds: float = 2.0,
        stale_after_seconds: float = 1800
    ):
        self.database = database
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds
        self.stale_after_seconds = stale_after_seconds

    def enqueue(
        self,
        name: str,
        payload: Dict[str, Any],
        organization_id: Optional[str] = None,
        max_attempts: Optional[int] = None,
        run_at: Optional[datetime] = None
    ) -> BackgroundJobModel:
        """
        Persist a pending job.

        Args:
            name: Handler name (e.g. ``batch-analysis``)
            payload: JSON-serializable job data
            organization_id: Owning organization, used to scope status lookups
            max_attempts: Attempts before the job is marked dead
            run_at: Earliest execution time (default now)
        """
        with self.database.session_scope() as session:
            job = BackgroundJobModel(
                name=name,
                organization_id=organization_id,
                payload=payload,
                status=JobStatus.PENDING,
                attempts=0,
                max_attempts=max_attempts or self.max_attempts,
                run_at=run_at or utcnow(),
            )
            session.add(job)
            session.flush()
        logger.info(f"Enqueued job {job.id} ({name})")
        return job

    def get(self, job_id: str) -> Optional[BackgroundJobModel]:
        with self.database.session_scope() as session:
            return session.query(BackgroundJobModel).filter_by(id=job_id).first()

    def claim_next(self, now: Optional[datetime] = None) -> Optional[BackgroundJobModel]:
        """
        Claim the oldest due pending job, marking it running.
        Row locks skip jobs already claimed by another worker where supported.
        """
        now = now or utcnow()
        with self.database.session_scope() as session:
            job = (
                session.query(BackgroundJobModel)
                .filter(
                    BackgroundJobModel.status == JobStatus.PENDING,
                    BackgroundJobModel.run_at <= now,
                )
                .order_by(BackgroundJobModel.run_at, BackgroundJobModel.created_at)
                .with_for_update(skip_locked=True)
                .first()
            )
            if job is None:
                return None

            job.status = JobStatus.RUNNING
            job.attempts += 1
            job.started_at = now
            session.flush()
            return job

    def complete(self, job_id: str, result: Any = None) -> None:
        with self.database.session_scope() as session:
            job = session.query(BackgroundJobModel).filter_by(id=job_id).first()
            if job is None:
                return
            job.status = JobStatus.COMPLETED
            job.result = result
            job.last_error = None

    def backoff_delay(self, attempts: int) -> float:
        """Exponential backoff: base, 2*base, 4*base, ..."""
        return self.backoff_base_seconds * (2 ** max(0, attempts - 1))

    def fail(self, job_id: str, error: str, now: Optional[datetime] = None) -> JobStatus:
        """
        Record a failed attempt.

        Returns:
            PENDING when the job will be retried, DEAD when attempts are exhausted
        """
        now = now or utcnow()
        with self.database.session_scope() as session:
            job = session.query(BackgroundJobModel).filter_by(id=job_id).first()
            if job is None:
                return JobStatus.DEAD

            job.last_error = error
            if job.attempts >= job.max_attempts:
                job.status = JobStatus.DEAD
                logger.error(f"Job {job.id} ({job.name}) is dead after {job.attempts} attempts: {error}")
            else:
                job.status = JobStatus.PENDING
                job.run_at = now + timedelta(seconds=self.backoff_delay(job.attempts))
                logger.warning(
                    f"Job {job.id} ({job.name}) failed attempt {job.attempts}/{job.max_attempts}, "
                    f"retrying at {job.run_at.isoformat()}: {error}"
                )
            return job.status

    def requeue_interrupted(self, now: Optional[datetime] = None) -> int:
        """
        Return stale running jobs to the queue.

        Only jobs claimed more than ``stale_after_seconds`` ago are reset, so a
        starting process leaves jobs that live workers elsewhere are running.
        """
        now = now or utcnow()
        cutoff = now - timedelta(seconds=self.stale_after_seconds)
        with self.database.session_scope() as session:
            count = (
                session.query(BackgroundJobModel)
                .filter(
                    BackgroundJobModel.status == JobStatus.RUNNING,
                    BackgroundJobModel.started_at <= cutoff,
                )
                .update({BackgroundJobModel.status: JobStatus.PENDING}, synchronize_session=False)
            )
        if count:
            logger.info(f"Re-queued {count} interrupted jobs")
        return count
