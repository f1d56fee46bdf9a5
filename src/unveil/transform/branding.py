"""Overlays appended to transformed pages."""

from bs4 import BeautifulSoup, Tag

from unveil.transform.report import TransformReport


BRAND_BAR_STYLE = "z-index: 99999; position: fixed; top: 0; right: 1rem; display: flex; gap: 8px;"

BRAND_LINK_STYLE = (
    "color: #fff; text-decoration: none; font-weight: bold; "
    "background: rgba(37,99,235, 0.9); box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1); "
    "padding: 6px 10px; margin: 0px; overflow: hidden; "
    "border-bottom-left-radius: 8px; border-bottom-right-radius: 8px; "
    "font-family: sans-serif; font-size: 13px;"
)

DEBUG_PANEL_STYLE = (
    "position: fixed; bottom: 1rem; right: 1rem; max-width: 400px; padding: 1rem; "
    "background: rgba(255, 255, 255, 0.9); border: 1px solid #e5e7eb; "
    "border-radius: 0.5rem; box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1); overflow: auto; "
    "max-height: 80vh; z-index: 9999; font-family: monospace; font-size: 13px; "
    "line-height: 1.4;"
)

NO_RULES_TEXT = "No rules activated"


def brand_bar(
    soup: BeautifulSoup,
    original_url: str,
    site_url: str,
    site_name: str,
) -> Tag:
    """Build the fixed bar linking to the original page and to this service.

    Args:
        soup: Document used as the tag factory.
        original_url: URL of the page as requested.
        site_url: Public URL of the service.
        site_name: Display name of the service.

    Returns:
        The bar element, not yet attached.
    """
    bar = soup.new_tag("div", attrs={"style": BRAND_BAR_STYLE, "data-unveil": "brand"})
    for href, label in ((original_url, "Original"), (site_url, site_name)):
        link = soup.new_tag(
            "a",
            attrs={
                "href": href,
                "style": BRAND_LINK_STYLE,
                "target": "_blank",
                "rel": "noopener",
            },
        )
        link.string = label
        bar.append(link)
    return bar


def debug_panel(soup: BeautifulSoup, report: TransformReport) -> Tag:
    """Build the diagnostics panel listing fired rules.

    Args:
        soup: Document used as the tag factory.
        report: Report of the current transformation.

    Returns:
        The panel element, not yet attached.
    """
    panel = soup.new_tag("div", attrs={"style": DEBUG_PANEL_STYLE, "data-unveil": "debug"})
    for entry in report.fired or [NO_RULES_TEXT]:
        line = soup.new_tag("div")
        line.string = entry
        panel.append(line)
    return panel
