"""
Base use case classes for the application layer.
Provides common structure for use case implementations.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class BaseUseCase(ABC):
    """
    Base class for all use cases.
    Owns the unit of work: the session is rolled back when the use case raises,
    and committed by command use cases once their writes are complete.
    """

    def __init__(self, session: Session):
        self.session = session

    async def execute(self, *args: Any, **kwargs: Any) -> Any:
        """
        Execute the use case with rollback on failure and timing logs.
        """
        started = time.perf_counter()
        try:
            result = await self._execute(*args, **kwargs)
        except Exception:
            self.session.rollback()
            raise

        logger.debug(
            f"{type(self).__name__} finished in {time.perf_counter() - started:.3f}s"
        )
        return result

    @abstractmethod
    async def _execute(self, *args: Any, **kwargs: Any) -> Any:
        """Execute the core business logic. Must be implemented by subclasses."""


class CommandUseCase(BaseUseCase):
    """Base class for write operations."""

    def commit(self) -> None:
        self.session.commit()


class QueryUseCase(BaseUseCase):
    """Base class for read operations."""
    pass
