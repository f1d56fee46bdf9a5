"""Cache keys derived from request URLs."""

import hashlib
import re


# Scheme matched case-insensitively; host casing is left alone
_SCHEME_AND_WWW = re.compile(r"^(?i:https?://)(www\.)?")


def normalize_url(url: str) -> str:
    """Drop the scheme and a leading ``www.`` so variants share one entry.

    Host casing and the rest of the URL are kept as given.

    Args:
        url: Requested URL.

    Returns:
        Normalized URL.
    """
    return _SCHEME_AND_WWW.sub("", url)


def cache_id(url: str) -> str:
    """Compute the cache key for a URL.

    Args:
        url: Requested URL.

    Returns:
        SHA-256 hex digest of the normalized URL.
    """
    return hashlib.sha256(normalize_url(url).encode("utf-8")).hexdigest()
