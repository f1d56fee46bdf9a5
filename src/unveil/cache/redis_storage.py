"""Key-value cache backend on Redis."""

import gzip
import zlib

import redis
import structlog

from unveil.cache.disk import GZIP_LEVEL


logger = structlog.get_logger()

COUNT_KEY = "cache_file_count"
CONNECT_TIMEOUT_SECONDS = 2.5


class RedisStorage:
    """Gzip blobs stored under a key prefix.

    If the server cannot be reached at construction the storage runs
    disabled: nothing exists and writes are refused.
    """

    def __init__(
        self,
        host: str,
        port: int,
        prefix: str,
        client: redis.Redis | None = None,
    ) -> None:
        """Initialize the storage.

        Args:
            host: Redis host.
            port: Redis port.
            prefix: Prefix for every key written.
            client: Pre-built client (for testing).
        """
        self._prefix = prefix
        self._log = logger.bind(component="cache", backend="redis", host=host, port=port)
        self._client: redis.Redis | None = client or redis.Redis(
            host=host,
            port=port,
            socket_connect_timeout=CONNECT_TIMEOUT_SECONDS,
            socket_timeout=CONNECT_TIMEOUT_SECONDS,
        )
        try:
            self._client.ping()
        except redis.RedisError as e:
            self._log.warning("cache_backend_unavailable", error=str(e))
            self._client = None

    @property
    def enabled(self) -> bool:
        """Whether the server was reachable at start."""
        return self._client is not None

    def _key(self, cache_id: str) -> str:
        return f"{self._prefix}{cache_id}"

    def exists(self, cache_id: str) -> bool:
        if self._client is None:
            return False
        try:
            return bool(self._client.exists(self._key(cache_id)))
        except redis.RedisError as e:
            self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return False

    def get(self, cache_id: str) -> bytes | None:
        if self._client is None:
            return None
        try:
            payload = self._client.get(self._key(cache_id))
        except redis.RedisError as e:
            self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return None
        if payload is None:
            return None
        try:
            return gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as e:
            self._log.warning("cache_decode_failed", cache_id=cache_id, error=str(e))
            return None

    def set(self, cache_id: str, content: bytes) -> bool:
        if self._client is None:
            return False
        key = self._key(cache_id)
        try:
            is_new = not self._client.exists(key)
            self._client.set(key, gzip.compress(content, compresslevel=GZIP_LEVEL))
        except redis.RedisError as e:
            self._log.warning("cache_write_failed", cache_id=cache_id, error=str(e))
            return False
        if is_new:
            self._increment()
        return True

    def count(self) -> int:
        """Get the entry count, seeding it by key scan when absent."""
        if self._client is None:
            return 0
        counter_key = self._key(COUNT_KEY)
        try:
            stored = self._client.get(counter_key)
            if stored is not None:
                return int(stored)
            scanned = sum(
                1
                for key in self._client.scan_iter(match=f"{self._prefix}*")
                if key not in (counter_key, counter_key.encode("utf-8"))
            )
            self._client.set(counter_key, scanned)
        except redis.RedisError as e:
            self._log.warning("counter_read_failed", error=str(e))
            return 0
        return scanned

    def _increment(self) -> None:
        if self._client is None:
            return
        counter_key = self._key(COUNT_KEY)
        try:
            if self._client.exists(counter_key):
                self._client.incr(counter_key)
            else:
                self.count()
        except redis.RedisError as e:
            self._log.warning("counter_update_failed", error=str(e))
