"""Cache storage protocols."""

from typing import Protocol, runtime_checkable


class CacheStorage(Protocol):
    """Point operations over cache ids.

    Backend failures are logged and reported as absence or False; they
    never propagate to callers.
    """

    def exists(self, cache_id: str) -> bool:
        """Check whether an entry exists."""
        ...

    def get(self, cache_id: str) -> bytes | None:
        """Read an entry's raw (decompressed) bytes."""
        ...

    def set(self, cache_id: str, content: bytes) -> bool:
        """Store an entry; last writer wins."""
        ...


@runtime_checkable
class CountingStorage(Protocol):
    """Storage that can report how many entries it holds."""

    def count(self) -> int:
        """Best-effort number of stored entries."""
        ...
