"""Mapping of low-level failures onto the error taxonomy."""

import structlog

from unveil.errors.models import AnalysisError, ErrorKind
from unveil.fetch.constants import HTTP_STATUS_NOT_FOUND
from unveil.fetch.models import FetchError, FetchErrorClass
from unveil.i18n import MessageCatalog


logger = structlog.get_logger()

_STRUCTURED: dict[FetchErrorClass, ErrorKind] = {
    FetchErrorClass.DNS: ErrorKind.DNS_FAILURE,
    FetchErrorClass.CONNECTION_ERROR: ErrorKind.CONNECTION_ERROR,
    FetchErrorClass.NETWORK_TIMEOUT: ErrorKind.CONNECTION_ERROR,
    FetchErrorClass.NOT_FOUND: ErrorKind.NOT_FOUND,
    FetchErrorClass.EMPTY_CONTENT: ErrorKind.CONTENT_ERROR,
}

# Checked in order; the first kind with a matching marker wins
_TEXT_MARKERS: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.DNS_FAILURE, ("dns", "name resolution", "could not resolve")),
    (ErrorKind.CONNECTION_ERROR, ("connect", "curl", "timeout", "timed out")),
    (ErrorKind.HTTP_ERROR, ("http",)),
    (ErrorKind.NOT_FOUND, ("not found",)),
)


class ErrorClassifier:
    """Turns fetch failures and stray exceptions into AnalysisError values."""

    def __init__(self, catalog: MessageCatalog | None = None) -> None:
        """Initialize the classifier.

        Args:
            catalog: Localized messages; English when omitted.
        """
        self._catalog = catalog or MessageCatalog()

    def classify(self, failure: FetchError | BaseException | str) -> ErrorKind:
        """Map a failure onto a taxonomy kind.

        Structured fetch errors map by class; anything else is matched on
        its text.

        Args:
            failure: Fetch error, exception or message.

        Returns:
            The error kind.
        """
        if isinstance(failure, AnalysisError):
            return failure.kind

        if isinstance(failure, FetchError):
            if failure.error_class == FetchErrorClass.HTTP_STATUS:
                if failure.status_code == HTTP_STATUS_NOT_FOUND:
                    return ErrorKind.NOT_FOUND
                return ErrorKind.HTTP_ERROR
            kind = _STRUCTURED.get(failure.error_class)
            if kind is not None:
                return kind
            text = failure.message
        else:
            text = str(failure)

        lowered = text.lower()
        for kind, markers in _TEXT_MARKERS:
            if any(marker in lowered for marker in markers):
                return kind
        return ErrorKind.GENERIC_ERROR

    def build(self, kind: ErrorKind, details: str | None = None) -> AnalysisError:
        """Create a localized AnalysisError.

        Args:
            kind: Taxonomy kind.
            details: Optional diagnostic appended to the message.

        Returns:
            The error, ready to raise.
        """
        entry = self._catalog.get_message(kind.value)
        message = f"{entry.message}: {details}" if details else entry.message
        return AnalysisError(
            kind=kind,
            message=message,
            details=details,
            message_type=entry.type,
        )

    def from_failure(self, failure: FetchError | BaseException) -> AnalysisError:
        """Classify a failure and build the matching error.

        Args:
            failure: Fetch error or exception.

        Returns:
            Localized AnalysisError carrying the failure text as details.
        """
        if isinstance(failure, AnalysisError):
            return failure
        kind = self.classify(failure)
        details = failure.message if isinstance(failure, FetchError) else str(failure)
        logger.debug(
            "failure_classified",
            component="errors",
            kind=kind.value,
            details=details,
        )
        return self.build(kind, details or None)
