"""
Token revocation list kept in the key-value store.
Entries expire together with the token they revoke.
"""

import hashlib
import logging

from claimflow.infrastructure.cache.store import KeyValueStore

logger = logging.getLogger(__name__)


class RevocationList:
    """Blacklist of logged-out or rotated tokens."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def _key(token: str) -> str:
        # Hash so raw bearer tokens never sit in the store
        return f"blacklist:{hashlib.sha256(token.encode()).hexdigest()}"

    async def blacklist(self, token: str, ttl_seconds: int) -> None:
        """
        Revoke a token for the rest of its lifetime.

        Args:
            token: Raw JWT
            ttl_seconds: Remaining lifetime; non-positive means already expired
        """
        if not token or ttl_seconds <= 0:
            return
        await self.store.set(self._key(token), "1", ttl_seconds)

    async def is_blacklisted(self, token: str) -> bool:
        """
        Check whether a token was revoked.
        A store failure is logged and treated as not revoked; signature,
        expiry and session checks still apply.
        """
        try:
            return await self.store.exists(self._key(token))
        except Exception as e:
            logger.error(f"Revocation check failed, continuing without it: {e}")
            return False
