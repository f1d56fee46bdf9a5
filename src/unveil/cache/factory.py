"""Storage backend selection."""

import structlog

from unveil.cache.base import CacheStorage
from unveil.cache.disk import DiskStorage
from unveil.cache.redis_storage import RedisStorage
from unveil.cache.s3_storage import S3Storage
from unveil.cache.sqlite_storage import SQLiteStorage
from unveil.cache.store import CacheStore
from unveil.settings import AppSettings, CacheBackend


logger = structlog.get_logger()


class CacheConfigurationError(Exception):
    """Raised when the selected backend is missing required settings."""


def create_storage(settings: AppSettings) -> CacheStorage:
    """Create the backend named by ``cache_backend``.

    Args:
        settings: Application settings.

    Returns:
        The storage backend.

    Raises:
        CacheConfigurationError: If the backend is missing settings.
    """
    backend = settings.cache_backend
    logger.debug("cache_backend_selected", component="cache", backend=backend.value)

    if backend == CacheBackend.DISK:
        return DiskStorage(settings.cache_dir)

    if backend == CacheBackend.SQLITE:
        return SQLiteStorage(settings.cache_dir)

    if backend == CacheBackend.REDIS:
        return RedisStorage(
            host=settings.redis_host,
            port=settings.redis_port,
            prefix=settings.redis_prefix,
        )

    if not settings.s3_bucket:
        msg = "S3_BUCKET is required for the s3 cache backend"
        raise CacheConfigurationError(msg)
    return S3Storage(
        bucket=settings.s3_bucket,
        prefix=settings.s3_folder,
        acl=settings.s3_acl,
        region=settings.s3_region,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        endpoint=settings.s3_endpoint,
    )


def create_cache_store(settings: AppSettings) -> CacheStore:
    """Create the cache facade for the configured backend.

    Args:
        settings: Application settings.

    Returns:
        CacheStore honoring ``disable_cache``.
    """
    return CacheStore(create_storage(settings), disabled=settings.disable_cache)
