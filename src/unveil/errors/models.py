"""Error taxonomy surfaced to callers."""

from enum import Enum
from types import MappingProxyType


class ErrorKind(str, Enum):
    """Every failure reported by the analyzer is exactly one of these."""

    INVALID_URL = "INVALID_URL"
    BLOCKED_DOMAIN = "BLOCKED_DOMAIN"
    NOT_FOUND = "NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_FAILURE = "DNS_FAILURE"
    CONTENT_ERROR = "CONTENT_ERROR"
    GENERIC_ERROR = "GENERIC_ERROR"


ERROR_STATUS_CODES: MappingProxyType[ErrorKind, int] = MappingProxyType(
    {
        ErrorKind.INVALID_URL: 400,
        ErrorKind.BLOCKED_DOMAIN: 403,
        ErrorKind.NOT_FOUND: 404,
        ErrorKind.HTTP_ERROR: 502,
        ErrorKind.CONNECTION_ERROR: 503,
        ErrorKind.DNS_FAILURE: 504,
        ErrorKind.CONTENT_ERROR: 502,
        ErrorKind.GENERIC_ERROR: 500,
    }
)


class AnalysisError(Exception):
    """Failure of an analysis request, ready to be shown to a user.

    Provides structured error information for logging and API responses.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: str | None = None,
        message_type: str = "error",
    ) -> None:
        """Initialize the analysis error.

        Args:
            kind: Taxonomy kind.
            message: Localized message, already including details.
            details: Diagnostic detail, if any.
            message_type: Severity from the message catalog.
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details
        self.message_type = message_type

    @property
    def status_code(self) -> int:
        """HTTP status code associated with the kind."""
        return ERROR_STATUS_CODES[self.kind]

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.kind.value,
            "status_code": self.status_code,
            "message": self.message,
            "type": self.message_type,
            "details": self.details,
        }
