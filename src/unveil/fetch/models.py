"""Data models for the fetch layer."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from unveil.fetch.constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
    HTTP_STATUS_OK,
)


_HTTP_SERVER_ERROR_MIN = 500


class StrategyName(str, Enum):
    """Names of the available fetch strategies, in default priority order."""

    DIRECT = "direct"
    ARCHIVE = "archive"
    BROWSER = "browser"


class BrowserEngine(str, Enum):
    """Remote automation engines."""

    FIREFOX = "firefox"
    CHROME = "chrome"


class FetchErrorClass(str, Enum):
    """Structured classification of fetch failures.

    - DNS: Host name could not be resolved
    - CONNECTION_ERROR: Could not establish or keep a connection
    - NETWORK_TIMEOUT: Request or page load timed out
    - HTTP_STATUS: Upstream answered with a non-200 status
    - NOT_FOUND: Resource (or archive snapshot) does not exist
    - EMPTY_CONTENT: Request succeeded but returned no usable body
    - AUTOMATION: Browser automation session failed
    - UNKNOWN: Unclassified error
    """

    DNS = "DNS"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    HTTP_STATUS = "HTTP_STATUS"
    NOT_FOUND = "NOT_FOUND"
    EMPTY_CONTENT = "EMPTY_CONTENT"
    AUTOMATION = "AUTOMATION"
    UNKNOWN = "UNKNOWN"


class FetchError(BaseModel):
    """Typed failure from a fetch attempt.

    Carries enough structure for the error classifier to map it without
    inspecting the message text.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    status_code: int | None = Field(
        default=None, description="HTTP status code if available"
    )


class FetchResult(BaseModel):
    """Result of one fetch strategy attempt.

    Holds either the raw page body or the failure that prevented it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: StrategyName
    final_url: Annotated[str, Field(min_length=1)]
    status_code: int = Field(default=0, ge=0, le=599)
    body: bytes = Field(default=b"", description="Raw response body")
    error: FetchError | None = None

    @property
    def is_admissible(self) -> bool:
        """Whether the result carries usable content."""
        return self.error is None and len(self.body) > 0

    @property
    def body_size(self) -> int:
        """Get the size of the body in bytes."""
        return len(self.body)

    @classmethod
    def failure(
        cls,
        strategy: StrategyName,
        url: str,
        error_class: FetchErrorClass,
        message: str,
        status_code: int | None = None,
    ) -> "FetchResult":
        """Build a failed result."""
        return cls(
            strategy=strategy,
            final_url=url,
            status_code=status_code or 0,
            error=FetchError(
                error_class=error_class,
                message=message,
                status_code=status_code,
            ),
        )


class RetryPolicy(BaseModel):
    """Fixed-delay retry behavior for direct fetches."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: Annotated[int, Field(ge=1, le=10)] = DEFAULT_MAX_ATTEMPTS
    delay_ms: Annotated[int, Field(ge=0, le=60000)] = DEFAULT_RETRY_DELAY_MS

    def should_retry(self, error: FetchError, attempt: int) -> bool:
        """Determine if a request should be retried.

        Args:
            error: The error that occurred.
            attempt: Current attempt number (0-indexed).

        Returns:
            True if another attempt is allowed and worthwhile.
        """
        if attempt + 1 >= self.max_attempts:
            return False

        if error.error_class in {
            FetchErrorClass.NETWORK_TIMEOUT,
            FetchErrorClass.CONNECTION_ERROR,
        }:
            return True

        return (
            error.error_class == FetchErrorClass.HTTP_STATUS
            and error.status_code is not None
            and error.status_code >= _HTTP_SERVER_ERROR_MIN
        )


class StatusCheck(BaseModel):
    """Upstream status and redirect information for a URL."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    final_url: str
    has_redirect: bool
    http_status: int

    @property
    def is_ok(self) -> bool:
        """Whether the upstream answered 200."""
        return self.http_status == HTTP_STATUS_OK


class ProbeResult(BaseModel):
    """Outcome of a HEAD request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    requested_url: str
    final_url: str
    status_code: int = Field(default=0, ge=0, le=599)
    error: FetchError | None = None

    @property
    def has_redirect(self) -> bool:
        """Whether the final URL differs from the requested one."""
        return self.final_url != self.requested_url
