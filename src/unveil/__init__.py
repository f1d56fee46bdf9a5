"""Rule-driven page fetching and HTML sanitization engine."""

__version__ = "0.1.0"
