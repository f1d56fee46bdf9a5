"""HTML transformation pipeline and DOM edit helpers."""

from unveil.transform.report import TransformReport
from unveil.transform.transformer import MIN_CONTENT_BYTES, ContentTransformer


__all__ = ["MIN_CONTENT_BYTES", "ContentTransformer", "TransformReport"]
