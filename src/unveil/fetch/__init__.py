"""Page retrieval layer.

This package provides the transport shared by all fetch strategies:
- DNS gating through configured name servers
- Bounded fixed-delay retries with structured failure classes
- Redirect limits, proxy routing and header redaction
- Metrics collection for observability

Strategies and the orchestrator live in ``unveil.fetch.strategies`` and
``unveil.fetch.orchestrator``.
"""

from unveil.fetch.client import HttpTransport
from unveil.fetch.config import BrowserConfig, FetchConfig
from unveil.fetch.constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
)
from unveil.fetch.dns_gate import DnsGate
from unveil.fetch.metrics import FetchMetrics
from unveil.fetch.models import (
    BrowserEngine,
    FetchError,
    FetchErrorClass,
    FetchResult,
    ProbeResult,
    RetryPolicy,
    StatusCheck,
    StrategyName,
)
from unveil.fetch.redact import redact_headers, redact_url_credentials


__all__ = [
    # Transport
    "HttpTransport",
    "DnsGate",
    # Config
    "FetchConfig",
    "BrowserConfig",
    # Models
    "BrowserEngine",
    "FetchError",
    "FetchErrorClass",
    "FetchResult",
    "ProbeResult",
    "RetryPolicy",
    "StatusCheck",
    "StrategyName",
    # Constants
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_RETRY_DELAY_MS",
    "HTTP_STATUS_NOT_FOUND",
    "HTTP_STATUS_OK",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
