"""
Token authentication shared by the HTTP dependency and the websocket channel.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from claimflow.domain.models.base import UnauthorizedError
from claimflow.domain.models.user import AuthContext
from claimflow.infrastructure.auth.revocation import RevocationList
from claimflow.infrastructure.auth.sessions import SessionStore
from claimflow.infrastructure.auth.token_codec import TokenCodec

logger = logging.getLogger(__name__)

NO_TOKEN = "No token provided"
TOKEN_REVOKED = "Token is invalid"
TOKEN_INVALID = "Invalid token"
SESSION_INVALID = "Invalid session"


class Authenticator:
    """
    Resolves a presented token to an AuthContext.

    Checks run cheapest first: presence, revocation list, signature and
    expiry, then the session lookup.
    """

    def __init__(self, tokens: TokenCodec, revocations: RevocationList):
        self.tokens = tokens
        self.revocations = revocations

    async def authenticate(self, token: Optional[str], db: Session) -> AuthContext:
        """
        Authenticate a raw token.

        Raises:
            UnauthorizedError: With the message of the first failing check
        """
        if not token:
            raise UnauthorizedError(NO_TOKEN)

        if await self.revocations.is_blacklisted(token):
            raise UnauthorizedError(TOKEN_REVOKED)

        payload = self.tokens.verify(token)
        if not payload or not payload.get("id"):
            raise UnauthorizedError(TOKEN_INVALID)

        session = SessionStore(db).find_active(payload["id"])
        if session is None:
            logger.info(f"Rejected token for user {payload['id']}: no active session")
            raise UnauthorizedError(SESSION_INVALID)

        return AuthContext(
            id=session.user_id,
            email=session.email,
            role=session.role,
            organization_id=session.organization_id,
            token=token,
        )
