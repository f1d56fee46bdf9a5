"""Rule-driven DOM edits."""

import re

from bs4 import BeautifulSoup, Tag

from unveil.rules.models import MergedRuleSet
from unveil.transform.report import TransformReport
from unveil.transform.skeleton import ensure_skeleton


# Removing these would leave nothing to attach content to
_STRUCTURAL_TAGS = frozenset({"html", "head", "body"})


def apply_rules(
    soup: BeautifulSoup,
    rules: MergedRuleSet,
    report: TransformReport,
) -> None:
    """Apply every DOM directive of a merged rule set.

    Removals run first so injected style and code are never matched by
    removal patterns.

    Args:
        soup: Parsed document with ``<head>`` and ``<body>``.
        rules: Merged rules for the page's host.
        report: Report receiving fired rules.
    """
    for element_id in rules.id_element_remove:
        _remove_all(soup.find_all(id=element_id), "id_element_remove", element_id, report)

    for token in rules.class_element_remove:
        _remove_all(
            soup.find_all(class_=token), "class_element_remove", token, report
        )

    for pattern in rules.script_tag_remove:
        _remove_all(_matching_scripts(soup, pattern), "script_tag_remove", pattern, report)

    for tag_name in rules.remove_elements_by_tag:
        if tag_name.lower() in _STRUCTURAL_TAGS:
            continue
        _remove_all(soup.find_all(tag_name), "remove_elements_by_tag", tag_name, report)

    for pattern in rules.remove_custom_attr:
        if strip_attributes(soup, pattern):
            report.record("remove_custom_attr", pattern)

    for token in rules.class_attr_remove:
        if strip_class_token(soup, token):
            report.record("class_attr_remove", token)

    if rules.custom_style:
        style = soup.new_tag("style")
        style.string = rules.custom_style
        head, _ = ensure_skeleton(soup)
        head.append(style)
        report.record("custom_style")

    if rules.custom_code:
        script = soup.new_tag("script", attrs={"type": "text/javascript"})
        script.string = rules.custom_code
        _, body = ensure_skeleton(soup)
        body.append(script)
        report.record("custom_code")


def strip_attributes(soup: BeautifulSoup, pattern: str) -> int:
    """Remove attributes by exact name or ``*`` wildcard pattern.

    Args:
        soup: Parsed document.
        pattern: Attribute name, possibly containing ``*``.

    Returns:
        Number of attributes removed.
    """
    if "*" not in pattern:
        elements = soup.find_all(attrs={pattern: True})
        for element in elements:
            del element[pattern]
        return len(elements)

    matcher = re.compile(
        "^" + re.escape(pattern).replace(r"\*", ".*") + "$", re.IGNORECASE
    )
    removed = 0
    for element in soup.find_all(True):
        for name in [a for a in element.attrs if matcher.match(a)]:
            del element[name]
            removed += 1
    return removed


def strip_class_token(soup: BeautifulSoup, token: str) -> int:
    """Remove one class token from every element, keeping the elements.

    Args:
        soup: Parsed document.
        token: Class token to strip.

    Returns:
        Number of elements changed.
    """
    elements = soup.find_all(class_=token)
    for element in elements:
        remaining = [c for c in element.get("class", []) if c != token]
        if remaining:
            element["class"] = remaining
        else:
            del element["class"]
    return len(elements)


def _matching_scripts(soup: BeautifulSoup, pattern: str) -> list[Tag]:
    """Scripts whose src or text contains the pattern, plus script preloads."""
    matches: list[Tag] = []
    for script in soup.find_all("script"):
        src = script.get("src")
        text = script.string or ""
        if (isinstance(src, str) and pattern in src) or pattern in text:
            matches.append(script)

    for link in soup.find_all("link", attrs={"as": "script"}):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "preload" not in (r.lower() for r in rel):
            continue
        href = link.get("href")
        if isinstance(href, str) and pattern in href:
            matches.append(link)
    return matches


def _remove_all(
    elements: list[Tag],
    rule: str,
    value: str,
    report: TransformReport,
) -> None:
    removed = 0
    for element in elements:
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    if removed:
        report.elements_removed += removed
        report.record(rule, value)

