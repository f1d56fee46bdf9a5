"""Ordered fallback across fetch strategies."""

import random
import time
from collections.abc import Sequence

import structlog

from unveil.errors import ErrorClassifier, ErrorKind
from unveil.fetch.client import HttpTransport
from unveil.fetch.constants import HTTP_STATUS_NOT_FOUND
from unveil.fetch.metrics import FetchMetrics
from unveil.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    StatusCheck,
    StrategyName,
)
from unveil.fetch.strategies.base import FetchStrategy
from unveil.fetch.strategies.direct import crawler_headers
from unveil.fetch.url_rewrite import apply_url_mods
from unveil.rules.models import MergedRuleSet


logger = structlog.get_logger()


class FetchOrchestrator:
    """Runs fetch strategies until one yields admissible content.

    Selection policy:
    - A strategy pinned by the rules is the only one attempted
    - Otherwise strategies run in the order given (direct, archive, browser)
    - The first non-empty body wins
    - When every strategy fails the last failure is classified
    """

    def __init__(
        self,
        transport: HttpTransport,
        strategies: Sequence[FetchStrategy],
        classifier: ErrorClassifier,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            transport: Transport used for status probes.
            strategies: Strategies in fallback order.
            classifier: Maps failures to analysis errors.
            rng: Random source for the probe's forwarded address.
        """
        self._transport = transport
        self._strategies = {strategy.name: strategy for strategy in strategies}
        self._order = [strategy.name for strategy in strategies]
        self._classifier = classifier
        self._rng = rng or random.Random()
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def strategy_order(self) -> list[StrategyName]:
        """Default fallback order."""
        return list(self._order)

    def fetch(self, url: str, rules: MergedRuleSet) -> FetchResult:
        """Probe (when needed) and retrieve a page.

        Args:
            url: Requested URL.
            rules: Merged rules for the URL's host.

        Returns:
            The winning FetchResult.

        Raises:
            AnalysisError: If the probe rejects the URL or every strategy fails.
        """
        if self.needs_probe(rules):
            self.probe(url)
        return self.retrieve(url, rules)

    def needs_probe(self, rules: MergedRuleSet) -> bool:
        """Whether a status probe precedes retrieval.

        Domains with custom rules skip the probe since many of them
        answer HEAD requests with errors.
        """
        return not rules.has_custom_rules

    def probe(self, url: str) -> StatusCheck:
        """Check that the URL answers 200 before fetching it.

        Args:
            url: Original requested URL.

        Returns:
            StatusCheck of the accepted URL.

        Raises:
            AnalysisError: On a non-200 status or when no response arrives.
        """
        result = self._transport.head(url, self._probe_headers())
        log = self._log.bind(url=url, status_code=result.status_code)

        if result.error is not None:
            self._metrics.record_probe(rejected=True)
            log.info("status_probe_failed", error_class=result.error.error_class.value)
            raise self._classifier.from_failure(result.error)

        if result.status_code == HTTP_STATUS_NOT_FOUND:
            self._metrics.record_probe(rejected=True)
            log.info("status_probe_rejected")
            raise self._classifier.build(ErrorKind.NOT_FOUND)

        status = StatusCheck(
            final_url=result.final_url,
            has_redirect=result.has_redirect,
            http_status=result.status_code,
        )
        if not status.is_ok:
            self._metrics.record_probe(rejected=True)
            log.info("status_probe_rejected")
            raise self._classifier.build(
                ErrorKind.HTTP_ERROR, f"HTTP {result.status_code}"
            )

        self._metrics.record_probe(rejected=False)
        log.debug("status_probe_passed")
        return status

    def retrieve(self, url: str, rules: MergedRuleSet) -> FetchResult:
        """Run the strategy loop without probing.

        Args:
            url: Requested URL; rule URL modifications are applied here.
            rules: Merged rules for the URL's host.

        Returns:
            The first admissible FetchResult.

        Raises:
            AnalysisError: If no strategy succeeds.
        """
        start_time_ns = time.perf_counter_ns()
        target = apply_url_mods(url, rules)
        log = self._log.bind(url=url)
        if target != url:
            log.debug("url_rewritten", target=target)

        if rules.fetch_strategy is not None:
            names = [rules.fetch_strategy]
            log.info("strategy_pinned", strategy=rules.fetch_strategy.value)
        else:
            names = self._order

        last_error: FetchError | None = None
        try:
            for name in names:
                strategy = self._strategies.get(name)
                if strategy is None:
                    log.warning("strategy_unavailable", strategy=name.value)
                    continue

                try:
                    result = strategy.attempt(target, rules)
                except Exception as e:
                    log.warning(
                        "strategy_raised",
                        strategy=name.value,
                        error_type=type(e).__name__,
                        exc_info=True,
                    )
                    result = FetchResult.failure(
                        name,
                        target,
                        FetchErrorClass.UNKNOWN,
                        str(e) or type(e).__name__,
                    )
                self._metrics.record_attempt(name, result.is_admissible)

                if result.is_admissible:
                    log.info(
                        "strategy_succeeded",
                        strategy=name.value,
                        bytes=result.body_size,
                        final_url=result.final_url,
                    )
                    return result

                last_error = result.error
                if last_error is not None:
                    self._metrics.record_failure(last_error.error_class)
                log.info(
                    "strategy_failed",
                    strategy=name.value,
                    error_class=last_error.error_class.value if last_error else None,
                    error=last_error.message if last_error else None,
                )
        finally:
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_duration(duration_ms)

        log.warning("all_strategies_failed", attempted=[n.value for n in names])
        if last_error is None:
            raise self._classifier.build(ErrorKind.CONTENT_ERROR)
        raise self._classifier.from_failure(last_error)

    def check_status(self, url: str) -> StatusCheck:
        """Report the final URL and status of a URL.

        Transport failures are reported as status 0 with the input URL.

        Args:
            url: URL to check.

        Returns:
            StatusCheck for the URL.
        """
        result = self._transport.head(url, self._probe_headers())
        if result.error is not None:
            self._log.debug(
                "status_check_failed",
                url=url,
                error_class=result.error.error_class.value,
            )
            return StatusCheck(final_url=url, has_redirect=False, http_status=0)
        return StatusCheck(
            final_url=result.final_url,
            has_redirect=result.has_redirect,
            http_status=result.status_code,
        )

    def _probe_headers(self) -> dict[str, str]:
        """Crawler identity for HEAD requests."""
        return crawler_headers(self._transport.config.primary_user_agent, self._rng)
