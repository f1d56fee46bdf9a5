"""Inline style cleanup."""

import re

from bs4 import BeautifulSoup


# Declarations used to clip or hide article bodies behind overlays
_BLOCKING_DECLARATION = re.compile(
    r"(?<![\w-])(max-height|height|overflow|position|display|visibility)\s*:\s*[^;]+;?",
    re.IGNORECASE,
)


def clean_declarations(style: str) -> str:
    """Remove layout-blocking declarations from a style string.

    Args:
        style: Inline style attribute value.

    Returns:
        The remaining declarations, stripped.
    """
    return _BLOCKING_DECLARATION.sub("", style).strip()


def clean_inline_styles(soup: BeautifulSoup) -> int:
    """Clean every inline ``style`` attribute in the document.

    Attributes left empty are removed.

    Args:
        soup: Parsed document.

    Returns:
        Number of elements whose style changed.
    """
    changed = 0
    for element in soup.find_all(style=True):
        original = element.get("style")
        if not isinstance(original, str):
            continue
        cleaned = clean_declarations(original)
        if cleaned == original.strip():
            continue
        changed += 1
        if cleaned.strip("; "):
            element["style"] = cleaned
        else:
            del element["style"]
    return changed
