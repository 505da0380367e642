"""
Cache-aside layer over the key-value store.
The relational store is the source of truth; every failure here degrades to a miss.
"""

import json
import logging
from typing import Any, Dict, Optional

from claimflow.infrastructure.cache.store import KeyValueStore

logger = logging.getLogger(__name__)


class CacheService:
    """JSON cache with best-effort semantics."""

    def __init__(self, store: KeyValueStore, default_ttl: int = 300):
        self.store = store
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Any]:
        """Get a cached value, or None on miss or store failure."""
        try:
            raw = await self.store.get(key)
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a JSON-serializable value."""
        try:
            await self.store.set(key, json.dumps(value, default=str), ttl_seconds or self.default_ttl)
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")

    async def invalidate_pattern(self, pattern: str) -> int:
        """Delete every entry matching a glob pattern; returns the number removed."""
        try:
            return await self.store.delete_pattern(pattern)
        except Exception as e:
            logger.error(f"Cache invalidate error for {pattern}: {e}")
            return 0


class ClaimCacheKeys:
    """Key layout for cached claim reads, scoped per organization."""

    @staticmethod
    def prefix(organization_id: str) -> str:
        return f"claims:{organization_id}:*"

    @staticmethod
    def list_key(organization_id: str, filters: Dict[str, Any]) -> str:
        encoded = json.dumps(filters, sort_keys=True, default=str, separators=(",", ":"))
        return f"claims:{organization_id}:list:{encoded}"

    @staticmethod
    def detail_key(organization_id: str, claim_id: str) -> str:
        return f"claims:{organization_id}:detail:{claim_id}"


def denial_analysis_key(denial_code: str, payer_id: Optional[str]) -> str:
    return f"ai:denial:{denial_code}:{payer_id or 'none'}"
