"""Raw page cache with interchangeable storage backends."""

from unveil.cache.base import CacheStorage, CountingStorage
from unveil.cache.disk import DiskStorage
from unveil.cache.factory import (
    CacheConfigurationError,
    create_cache_store,
    create_storage,
)
from unveil.cache.fingerprint import cache_id, normalize_url
from unveil.cache.metrics import CacheMetrics
from unveil.cache.redis_storage import RedisStorage
from unveil.cache.s3_storage import S3Storage
from unveil.cache.sqlite_storage import SQLiteStorage
from unveil.cache.store import CacheStore


__all__ = [
    # Facade
    "CacheStore",
    "CacheMetrics",
    # Backends
    "CacheStorage",
    "CountingStorage",
    "DiskStorage",
    "RedisStorage",
    "S3Storage",
    "SQLiteStorage",
    # Factory
    "CacheConfigurationError",
    "create_cache_store",
    "create_storage",
    # Keys
    "cache_id",
    "normalize_url",
]
