"""Canonical link and relative URL rewriting."""

import re
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from unveil.transform.skeleton import ensure_skeleton


# Any value carrying a scheme (http:, data:, mailto:, javascript:, ...)
_HAS_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

_URL_ATTRIBUTES = ("src", "href")


def rewrite_canonical(soup: BeautifulSoup, url: str) -> None:
    """Replace every canonical link with one pointing at ``url``.

    Args:
        soup: Parsed document with a ``<head>``.
        url: The requested URL.
    """
    for link in soup.find_all("link"):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "canonical" in (r.lower() for r in rel):
            link.decompose()

    canonical = soup.new_tag("link", attrs={"rel": "canonical", "href": url})
    head, _ = ensure_skeleton(soup)
    head.append(canonical)


def absolutize_urls(soup: BeautifulSoup, url: str) -> int:
    """Prefix relative ``src`` and ``href`` values with the page origin.

    Values with a scheme, protocol-relative values, fragment-only links
    and empty values are left alone. Relative paths resolve against the
    origin root, not the page path.

    Args:
        soup: Parsed document.
        url: The requested URL supplying scheme and host.

    Returns:
        Number of attributes rewritten.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return 0
    origin = f"{parts.scheme}://{parts.netloc}"

    rewritten = 0
    for attribute in _URL_ATTRIBUTES:
        for element in soup.find_all(attrs={attribute: True}):
            value = element.get(attribute)
            if not isinstance(value, str) or not _is_relative(value.strip()):
                continue
            element[attribute] = f"{origin}/{value.strip().lstrip('/')}"
            rewritten += 1
    return rewritten


def _is_relative(value: str) -> bool:
    if not value or value.startswith(("#", "//")):
        return False
    return _HAS_SCHEME.match(value) is None
