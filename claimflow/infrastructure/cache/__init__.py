"""
Key-value store and cache-aside helpers.
"""

from .store import (
    KeyValueStore, RedisKeyValueStore, InMemoryKeyValueStore, create_key_value_store
)
from .cache_service import CacheService, ClaimCacheKeys, denial_analysis_key

__all__ = [
    'KeyValueStore',
    'RedisKeyValueStore',
    'InMemoryKeyValueStore',
    'create_key_value_store',
    'CacheService',
    'ClaimCacheKeys',
    'denial_analysis_key',
]
