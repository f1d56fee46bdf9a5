"""HTML transformation pipeline."""

import structlog
from bs4 import BeautifulSoup

from unveil.errors import ErrorClassifier, ErrorKind
from unveil.fetch.models import StrategyName
from unveil.rules.models import MergedRuleSet
from unveil.transform.branding import brand_bar, debug_panel
from unveil.transform.dom_rules import apply_rules
from unveil.transform.report import TransformReport
from unveil.transform.skeleton import ensure_skeleton
from unveil.transform.styles import clean_inline_styles
from unveil.transform.urls import absolutize_urls, rewrite_canonical


logger = structlog.get_logger()

# Pages smaller than this are error pages or bot challenges, not articles
MIN_CONTENT_BYTES = 5120


class ContentTransformer:
    """Rewrites fetched HTML according to merged rules.

    Steps run in a fixed order:
    1. Size gate
    2. Parse (lxml, tolerant of broken markup)
    3. Canonical link rewrite
    4. Relative URL absolutization, when the rules ask for it
    5. Rule DOM edits
    6. Inline style cleanup
    7. Branding bar
    8. Diagnostics panel, in debug mode
    9. Serialization
    """

    def __init__(
        self,
        classifier: ErrorClassifier,
        site_url: str,
        site_name: str,
        debug: bool = False,
    ) -> None:
        """Initialize the transformer.

        Args:
            classifier: Builds errors for rejected content.
            site_url: Public URL of the service, linked from the brand bar.
            site_name: Display name of the service.
            debug: Append the diagnostics panel.
        """
        self._classifier = classifier
        self._site_url = site_url
        self._site_name = site_name
        self._debug = debug

    def transform(
        self,
        raw_html: bytes | str,
        host: str,
        requested_url: str,
        rules: MergedRuleSet,
        fetch_strategy: StrategyName | None = None,
    ) -> str:
        """Transform a page and return the HTML.

        Args:
            raw_html: Page as fetched or as cached.
            host: Host of the requested URL.
            requested_url: URL the caller asked for.
            rules: Merged rules for the host.
            fetch_strategy: Strategy that produced the content, when fresh.

        Returns:
            Serialized HTML.

        Raises:
            AnalysisError: CONTENT_ERROR if the payload is too small.
        """
        html, _ = self.render(raw_html, host, requested_url, rules, fetch_strategy)
        return html

    def check_size(self, raw_html: bytes | str, requested_url: str) -> bytes:
        """Reject payloads too small to be an article.

        Args:
            raw_html: Page as fetched or as cached.
            requested_url: URL the caller asked for.

        Returns:
            The payload as bytes.

        Raises:
            AnalysisError: CONTENT_ERROR below MIN_CONTENT_BYTES.
        """
        payload = raw_html.encode("utf-8") if isinstance(raw_html, str) else raw_html
        if len(payload) < MIN_CONTENT_BYTES:
            logger.info(
                "content_too_small",
                component="transform",
                url=requested_url,
                bytes=len(payload),
                minimum=MIN_CONTENT_BYTES,
            )
            raise self._classifier.build(
                ErrorKind.CONTENT_ERROR, f"{len(payload)} bytes"
            )
        return payload

    def render(
        self,
        raw_html: bytes | str,
        host: str,
        requested_url: str,
        rules: MergedRuleSet,
        fetch_strategy: StrategyName | None = None,
    ) -> tuple[str, TransformReport]:
        """Transform a page and return the HTML with its report.

        Args:
            raw_html: Page as fetched or as cached.
            host: Host of the requested URL.
            requested_url: URL the caller asked for.
            rules: Merged rules for the host.
            fetch_strategy: Strategy that produced the content, when fresh.

        Returns:
            Tuple of (serialized HTML, report of fired rules).

        Raises:
            AnalysisError: CONTENT_ERROR if the payload is too small.
        """
        log = logger.bind(component="transform", host=host, url=requested_url)
        payload = self.check_size(raw_html, requested_url)

        report = TransformReport()
        if fetch_strategy is not None:
            report.record("fetch_strategy", fetch_strategy.value)

        soup = BeautifulSoup(payload, "lxml")
        _, body = ensure_skeleton(soup)

        rewrite_canonical(soup, requested_url)

        if rules.fix_relative_urls:
            report.urls_rewritten = absolutize_urls(soup, requested_url)
            if report.urls_rewritten:
                report.record("fix_relative_urls")

        apply_rules(soup, rules, report)

        report.styles_cleaned = clean_inline_styles(soup)

        body.append(brand_bar(soup, requested_url, self._site_url, self._site_name))
        if self._debug:
            body.append(debug_panel(soup, report))

        log.debug("content_transformed", **report.to_dict())
        return str(soup), report

