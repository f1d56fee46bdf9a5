"""Metrics collection for the cache layer."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class CacheMetrics:
    """Metrics for cache operations.

    Singleton class that tracks hits, misses and writes.
    """

    cache_hits_total: int = 0
    cache_misses_total: int = 0
    cache_writes_total: int = 0
    cache_write_failures_total: int = 0
    cache_bytes_written_total: int = 0

    _instance: ClassVar["CacheMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "CacheMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_hit(self) -> None:
        """Record a cache hit."""
        self.cache_hits_total += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        self.cache_misses_total += 1

    def record_write(self, success: bool, size: int) -> None:
        """Record a cache write.

        Args:
            success: Whether the backend accepted the entry.
            size: Uncompressed entry size in bytes.
        """
        if success:
            self.cache_writes_total += 1
            self.cache_bytes_written_total += size
        else:
            self.cache_write_failures_total += 1

    @property
    def hit_ratio(self) -> float:
        """Fraction of lookups served from cache."""
        lookups = self.cache_hits_total + self.cache_misses_total
        if lookups == 0:
            return 0.0
        return self.cache_hits_total / lookups

    def to_dict(self) -> dict[str, int | float]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "cache_hits_total": self.cache_hits_total,
            "cache_misses_total": self.cache_misses_total,
            "cache_writes_total": self.cache_writes_total,
            "cache_write_failures_total": self.cache_write_failures_total,
            "cache_bytes_written_total": self.cache_bytes_written_total,
            "hit_ratio": self.hit_ratio,
        }
