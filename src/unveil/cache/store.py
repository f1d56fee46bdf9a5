"""URL-keyed cache facade over a storage backend."""

import structlog

from unveil.cache.base import CacheStorage, CountingStorage
from unveil.cache.fingerprint import cache_id
from unveil.cache.metrics import CacheMetrics


logger = structlog.get_logger()


class CacheStore:
    """Raw page cache keyed by URL.

    Entries hold the page exactly as fetched, before transformation.
    When disabled, nothing is found and writes report success without
    storing anything.
    """

    def __init__(self, storage: CacheStorage, disabled: bool = False) -> None:
        """Initialize the store.

        Args:
            storage: Backend holding the entries.
            disabled: Turn the cache into a no-op.
        """
        self._storage = storage
        self._disabled = disabled
        self._metrics = CacheMetrics.get_instance()
        self._log = logger.bind(component="cache", backend=type(storage).__name__)

    @property
    def disabled(self) -> bool:
        """Whether caching is turned off."""
        return self._disabled

    @property
    def storage(self) -> CacheStorage:
        """Underlying backend."""
        return self._storage

    def exists(self, url: str) -> bool:
        """Check whether a URL has a cached entry.

        Args:
            url: Requested URL.

        Returns:
            True on a hit.
        """
        if self._disabled:
            return False
        return self._storage.exists(cache_id(url))

    def get(self, url: str) -> bytes | None:
        """Read the cached page for a URL.

        Args:
            url: Requested URL.

        Returns:
            Raw page bytes, or None on a miss.
        """
        if self._disabled:
            self._metrics.record_miss()
            return None

        content = self._storage.get(cache_id(url))
        if content is None:
            self._metrics.record_miss()
            self._log.debug("cache_miss", url=url)
        else:
            self._metrics.record_hit()
            self._log.info("cache_hit", url=url, bytes=len(content))
        return content

    def set(self, url: str, content: bytes) -> bool:
        """Store the raw page for a URL.

        Args:
            url: Requested URL.
            content: Page bytes as fetched.

        Returns:
            True if stored (always True when disabled).
        """
        if self._disabled:
            return True

        stored = self._storage.set(cache_id(url), content)
        self._metrics.record_write(stored, len(content))
        if stored:
            self._log.debug("cache_stored", url=url, bytes=len(content))
        else:
            self._log.warning("cache_store_failed", url=url)
        return stored

    def count(self) -> int | None:
        """Best-effort number of cached entries.

        Returns:
            The count, or None when the backend cannot count.
        """
        if isinstance(self._storage, CountingStorage):
            return self._storage.count()
        return None
