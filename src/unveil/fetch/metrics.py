"""Metrics collection for the fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar

from unveil.fetch.models import FetchErrorClass, StrategyName


@dataclass
class FetchMetrics:
    """Metrics for fetch operations.

    Singleton class that tracks strategy attempts, outcomes, retries
    and failures by class.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    strategy_attempts_total: dict[str, int] = field(default_factory=dict)
    strategy_success_total: dict[str, int] = field(default_factory=dict)
    retry_total: int = 0
    probe_total: int = 0
    probe_rejected_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    bytes_total: int = 0
    duration_ms_total: float = 0.0
    fetch_count: int = 0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP request.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of bytes received.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )
        self.bytes_total += bytes_received

    def record_attempt(self, strategy: StrategyName, success: bool) -> None:
        """Record the outcome of one strategy attempt.

        Args:
            strategy: Strategy that ran.
            success: Whether it produced admissible content.
        """
        key = strategy.value
        self.strategy_attempts_total[key] = self.strategy_attempts_total.get(key, 0) + 1
        if success:
            self.strategy_success_total[key] = (
                self.strategy_success_total.get(key, 0) + 1
            )

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.retry_total += 1

    def record_probe(self, rejected: bool) -> None:
        """Record a status probe.

        Args:
            rejected: Whether the probe short-circuited the request.
        """
        self.probe_total += 1
        if rejected:
            self.probe_rejected_total += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a fetch failure.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record the duration of a full orchestrated fetch.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.duration_ms_total += duration_ms
        self.fetch_count += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "strategy_attempts_total": dict(self.strategy_attempts_total),
            "strategy_success_total": dict(self.strategy_success_total),
            "retry_total": self.retry_total,
            "probe_total": self.probe_total,
            "probe_rejected_total": self.probe_rejected_total,
            "failures_total": dict(self.failures_total),
            "bytes_total": self.bytes_total,
            "duration_ms_total": self.duration_ms_total,
            "fetch_count": self.fetch_count,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average fetch duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.fetch_count == 0:
            return 0.0
        return self.duration_ms_total / self.fetch_count
