"""
Background worker polling the durable job queue.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from claimflow.infrastructure.jobs.queue import JobQueue

logger = logging.getLogger(__name__)

JobHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class JobWorker:
    """Runs queued jobs inside the application's event loop."""

    def __init__(self, queue: JobQueue, poll_interval: float = 1.0):
        self.queue = queue
        self.poll_interval = poll_interval
        self.handlers: Dict[str, JobHandler] = {}
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    def register(self, name: str, handler: JobHandler) -> None:
        self.handlers[name] = handler

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional[str]:
        """
        Claim and execute at most one due job.

        Returns:
            The processed job id, or None when nothing was due
        """
        job = self.queue.claim_next()
        if job is None:
            return None

        handler = self.handlers.get(job.name)
        if handler is None:
            self.queue.fail(job.id, f"No handler registered for job '{job.name}'")
            return job.id

        logger.info(f"Processing job {job.id} ({job.name}), attempt {job.attempts}")
        try:
            result = await handler(dict(job.payload or {}))
        except Exception as exc:
            logger.error(f"Job {job.id} ({job.name}) raised {type(exc).__name__}: {exc}", exc_info=True)
            self.queue.fail(job.id, f"{type(exc).__name__}: {exc}")
        else:
            self.queue.complete(job.id, result)
            logger.info(f"Job {job.id} completed: {result}")

        return job.id

    async def run_until_idle(self, max_jobs: int = 100) -> int:
        """Drain every due job; used by tests and the CLI."""
        processed = 0
        while processed < max_jobs and await self.run_once() is not None:
            processed += 1
        return processed

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            try:
                processed = await self.run_once()
            except Exception as exc:
                # Queue/database trouble; keep polling
                logger.error(f"Job worker iteration failed: {exc}", exc_info=True)
                processed = None

            if processed is None:
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=self.poll_interval)
                except asyncio.TimeoutError:
                    pass

    def start(self) -> None:
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name="claimflow-job-worker")
        logger.info("Job worker started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        try:
            await asyncio.wait_for(self._task, timeout=10)
        except asyncio.TimeoutError:
            self._task.cancel()
        self._task = None
        logger.info("Job worker stopped")
