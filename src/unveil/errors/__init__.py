"""Error taxonomy and classification."""

from unveil.errors.classifier import ErrorClassifier
from unveil.errors.models import ERROR_STATUS_CODES, AnalysisError, ErrorKind


__all__ = ["ERROR_STATUS_CODES", "AnalysisError", "ErrorClassifier", "ErrorKind"]
