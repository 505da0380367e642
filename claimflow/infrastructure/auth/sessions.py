"""
Server-side session store.
A token is only honoured while its subject has an unexpired session row.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from claimflow.domain.models.user import UserRole
from claimflow.infrastructure.db.models import UserModel, UserSessionModel, utcnow


@dataclass(frozen=True)
class ActiveSession:
    """Result of a session lookup: the session's user as seen right now."""
    user_id: str
    email: str
    role: UserRole
    organization_id: str
    expires_at: datetime


class SessionStore:
    """SQLAlchemy-backed session rows."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        user_id: str,
        ttl_seconds: int,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> UserSessionModel:
        """Create a session expiring ``ttl_seconds`` from now. Caller commits."""
        model = UserSessionModel(
            user_id=user_id,
            expires_at=utcnow() + timedelta(seconds=ttl_seconds),
            user_agent=(user_agent or "")[:500] or None,
            ip_address=ip_address,
        )
        self.session.add(model)
        self.session.flush()
        return model

    def find_active(self, user_id: str) -> Optional[ActiveSession]:
        """
        Find the newest unexpired session of an active user.

        Expired rows are ignored here, not deleted; see ``purge_expired``.
        """
        row = (
            self.session.query(UserSessionModel, UserModel)
            .join(UserModel, UserModel.id == UserSessionModel.user_id)
            .filter(
                UserSessionModel.user_id == user_id,
                UserSessionModel.expires_at > utcnow(),
                UserModel.is_active.is_(True),
            )
            .order_by(UserSessionModel.expires_at.desc())
            .first()
        )
        if row is None:
            return None

        session_row, user = row
        return ActiveSession(
            user_id=user.id,
            email=user.email,
            role=UserRole(user.role),
            organization_id=user.organization_id,
            expires_at=session_row.expires_at,
        )

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete expired sessions. Run out of band, never on the request path."""
        cutoff = now or utcnow()
        deleted = (
            self.session.query(UserSessionModel)
            .filter(UserSessionModel.expires_at <= cutoff)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted
