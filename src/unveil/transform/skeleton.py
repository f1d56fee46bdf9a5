"""Document skeleton repair."""

from bs4 import BeautifulSoup, Doctype, Tag


def ensure_skeleton(soup: BeautifulSoup) -> tuple[Tag, Tag]:
    """Guarantee ``<html>``, ``<head>`` and ``<body>`` exist.

    Stray top-level content is moved under ``<html>`` and then into
    ``<body>``. Safe to call more than once.

    Args:
        soup: Parsed document, changed in place.

    Returns:
        Tuple of (head, body).
    """
    root = soup.html
    if root is None:
        root = soup.new_tag("html")
        for child in [c for c in soup.contents if not isinstance(c, Doctype)]:
            root.append(child.extract())
        soup.append(root)

    head = soup.head
    if head is None:
        head = soup.new_tag("head")
        root.insert(0, head)

    body = soup.body
    if body is None:
        body = soup.new_tag("body")
        for child in [c for c in root.contents if c is not head]:
            body.append(child.extract())
        root.append(body)

    return head, body
