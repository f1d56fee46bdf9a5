"""HTTP transport with bounded retries and failure classification."""

import time
from collections.abc import Callable
from urllib.parse import urlparse

import httpx
import structlog

from unveil.fetch.config import FetchConfig
from unveil.fetch.constants import HTTP_STATUS_OK
from unveil.fetch.dns_gate import DnsGate
from unveil.fetch.metrics import FetchMetrics
from unveil.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ProbeResult,
    RetryPolicy,
    StrategyName,
)
from unveil.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()

# Resolver messages surfaced by the OS when a host does not resolve
_DNS_ERROR_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated",
)


class HttpTransport:
    """HTTP GET/HEAD execution shared by the fetch strategies.

    Provides:
    - DNS gating through the configured name servers
    - Fixed-delay bounded retries for transient failures
    - Redirect limit, proxy routing and TLS verification from config
    - Header redaction for logging
    - Metrics collection
    """

    def __init__(
        self,
        config: FetchConfig,
        dns_gate: DnsGate | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Fetch configuration.
            dns_gate: Resolution gate; built from config when omitted.
            transport: Underlying httpx transport (for testing).
            sleep: Sleep function used between attempts.
        """
        self._config = config
        self._dns_gate = dns_gate or DnsGate(config.dns_servers)
        self._transport = transport
        self._sleep = sleep
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="http")

    @property
    def config(self) -> FetchConfig:
        """Configuration in use."""
        return self._config

    def get(
        self,
        url: str,
        headers: dict[str, str],
        strategy: StrategyName,
        retry_policy: RetryPolicy | None = None,
    ) -> FetchResult:
        """GET a URL, retrying transient failures.

        A 200 response with a non-empty body is the only success.

        Args:
            url: URL to fetch.
            headers: Complete request headers.
            strategy: Strategy the request is made on behalf of.
            retry_policy: Overrides the configured policy.

        Returns:
            FetchResult with the body or the last failure.
        """
        policy = retry_policy or self._config.retry_policy
        log = self._log.bind(url=url, strategy=strategy.value)

        dns_error = self._dns_gate.check(urlparse(url).hostname or "")
        if dns_error is not None:
            return self._result_from_error(strategy, url, dns_error)

        result = self._execute_single(url, headers, strategy, log, attempt=0)
        attempt = 0
        while result.error is not None and policy.should_retry(result.error, attempt):
            attempt += 1
            self._metrics.record_retry()
            log.debug(
                "retry_attempt",
                attempt=attempt,
                delay_ms=policy.delay_ms,
                max_attempts=policy.max_attempts,
                error_class=result.error.error_class.value,
            )
            self._sleep(policy.delay_ms / 1000.0)
            result = self._execute_single(url, headers, strategy, log, attempt=attempt)

        return result

    def head(self, url: str, headers: dict[str, str] | None = None) -> ProbeResult:
        """Issue a HEAD request with redirects followed.

        Non-200 statuses are reported through ``status_code`` only; ``error``
        is set when no response was received at all.

        Args:
            url: URL to probe.
            headers: Optional request headers.

        Returns:
            ProbeResult describing the response.
        """
        dns_error = self._dns_gate.check(urlparse(url).hostname or "")
        if dns_error is not None:
            return ProbeResult(requested_url=url, final_url=url, error=dns_error)

        try:
            with self._client(self._config.probe_timeout_seconds) as client:
                response = client.head(url, headers=headers or {})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = _error_from_exception(e)
            self._log.debug(
                "probe_transport_error",
                url=url,
                error_class=error.error_class.value,
            )
            return ProbeResult(requested_url=url, final_url=url, error=error)

        return ProbeResult(
            requested_url=url,
            final_url=str(response.url),
            status_code=response.status_code,
        )

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            max_redirects=self._config.max_redirects,
            proxy=self._config.proxy_url,
            verify=self._config.verify_tls,
            transport=self._transport,
        )

    def _execute_single(
        self,
        url: str,
        headers: dict[str, str],
        strategy: StrategyName,
        log: structlog.stdlib.BoundLogger,
        attempt: int,
    ) -> FetchResult:
        """Execute a single GET request.

        Args:
            url: URL to fetch.
            headers: Request headers.
            strategy: Strategy the request belongs to.
            log: Bound logger.
            attempt: Current attempt number.

        Returns:
            FetchResult from the request.
        """
        log.debug(
            "http_request",
            attempt=attempt,
            headers=redact_headers(headers),
            proxy=(
                redact_url_credentials(self._config.proxy_url)
                if self._config.proxy_url
                else None
            ),
        )

        try:
            with self._client(self._config.timeout_seconds) as client:
                response = client.get(url, headers=headers)
                body = response.content
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._result_from_error(strategy, url, _error_from_exception(e))

        self._metrics.record_request(response.status_code, len(body))
        final_url = str(response.url)

        if response.status_code != HTTP_STATUS_OK:
            return FetchResult(
                strategy=strategy,
                final_url=final_url,
                status_code=response.status_code,
                error=FetchError(
                    error_class=FetchErrorClass.HTTP_STATUS,
                    message=f"HTTP {response.status_code}",
                    status_code=response.status_code,
                ),
            )

        if not body.strip():
            return FetchResult(
                strategy=strategy,
                final_url=final_url,
                status_code=response.status_code,
                error=FetchError(
                    error_class=FetchErrorClass.EMPTY_CONTENT,
                    message="Empty response body",
                    status_code=response.status_code,
                ),
            )

        return FetchResult(
            strategy=strategy,
            final_url=final_url,
            status_code=response.status_code,
            body=body,
        )

    def _result_from_error(
        self, strategy: StrategyName, url: str, error: FetchError
    ) -> FetchResult:
        return FetchResult(
            strategy=strategy,
            final_url=url,
            status_code=error.status_code or 0,
            error=error,
        )


def _error_from_exception(exc: Exception) -> FetchError:
    """Classify an httpx exception.

    Args:
        exc: Exception raised while sending a request.

    Returns:
        Structured FetchError.
    """
    text = str(exc) or exc.__class__.__name__

    if isinstance(exc, httpx.TimeoutException):
        return FetchError(
            error_class=FetchErrorClass.NETWORK_TIMEOUT,
            message=f"Request timed out: {text}",
        )

    if isinstance(exc, httpx.TooManyRedirects):
        return FetchError(
            error_class=FetchErrorClass.HTTP_STATUS,
            message=f"Too many redirects: {text}",
        )

    if isinstance(exc, httpx.ConnectError):
        if any(marker in text.lower() for marker in _DNS_ERROR_MARKERS):
            return FetchError(
                error_class=FetchErrorClass.DNS,
                message=f"DNS resolution failed: {text}",
            )
        return FetchError(
            error_class=FetchErrorClass.CONNECTION_ERROR,
            message=f"Connection failed: {text}",
        )

    if isinstance(exc, httpx.TransportError):
        return FetchError(
            error_class=FetchErrorClass.CONNECTION_ERROR,
            message=f"Connection failed: {text}",
        )

    return FetchError(
        error_class=FetchErrorClass.UNKNOWN,
        message=f"Unexpected error: {text}",
    )
