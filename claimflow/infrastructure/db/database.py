"""
Database configuration and session management.
"""

from contextlib import contextmanager
from typing import Generator, Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, StaticPool

from claimflow.infrastructure.db.models import create_all_tables


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: Engine = self._create_engine(url, echo)

        # Create SessionLocal class
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                # One shared connection so every session sees the same in-memory database
                return create_engine(url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
            return create_engine(url, echo=echo, connect_args=connect_args)
        return create_engine(url, echo=echo, poolclass=NullPool)

    def create_tables(self) -> None:
        create_all_tables(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Transactional scope for work outside a request (jobs, CLI).
        Commits on success, rolls back on error.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    The handler's use case commits; anything left uncommitted is rolled back.
    """
    database: Database = request.app.state.container.database
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
