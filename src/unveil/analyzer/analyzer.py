"""Caller-facing facade that turns a URL into cleaned HTML."""

import uuid
from urllib.parse import urlparse

import structlog

from unveil.analyzer.state_machine import RequestState, RequestStateMachine
from unveil.cache import CacheStore
from unveil.errors import AnalysisError, ErrorClassifier, ErrorKind
from unveil.fetch.models import StatusCheck
from unveil.fetch.orchestrator import FetchOrchestrator
from unveil.observability import bind_request_context, clear_request_context
from unveil.rules import BlockList, RuleResolver, normalize_host
from unveil.transform import ContentTransformer


logger = structlog.get_logger()

_ALLOWED_SCHEMES = ("http", "https")


class Analyzer:
    """Runs one analysis request from URL validation to transformed HTML.

    Flow:
    1. Validate the URL
    2. Serve the raw page from cache when present
    3. Otherwise check the block list, resolve rules, probe when needed,
       run the strategy loop and store the raw page
    4. Transform the page for the caller

    Every failure leaves as an AnalysisError of one taxonomy kind.
    """

    def __init__(
        self,
        resolver: RuleResolver,
        blocklist: BlockList,
        cache: CacheStore,
        orchestrator: FetchOrchestrator,
        transformer: ContentTransformer,
        classifier: ErrorClassifier,
    ) -> None:
        """Initialize the analyzer.

        Args:
            resolver: Rule resolution for hosts.
            blocklist: Domains that are never fetched.
            cache: Raw page cache.
            orchestrator: Strategy loop and status probe.
            transformer: HTML rewriting.
            classifier: Failure mapping onto the error taxonomy.
        """
        self._resolver = resolver
        self._blocklist = blocklist
        self._cache = cache
        self._orchestrator = orchestrator
        self._transformer = transformer
        self._classifier = classifier

    @property
    def resolver(self) -> RuleResolver:
        """Rule resolver used for every request."""
        return self._resolver

    @property
    def cache(self) -> CacheStore:
        """Raw page cache."""
        return self._cache

    def analyze(self, url: str) -> str:
        """Fetch, clean and return a page.

        Args:
            url: Absolute http(s) URL.

        Returns:
            Transformed HTML.

        Raises:
            AnalysisError: On any failure.
        """
        request_id = uuid.uuid4().hex
        machine = RequestStateMachine(request_id)
        bind_request_context(request_id, url)
        log = logger.bind(component="analyzer")
        log.info("analysis_started")

        try:
            html = self._run(url, machine)
        except AnalysisError as e:
            machine.fail()
            log.warning(
                "analysis_failed",
                kind=e.kind.value,
                status_code=e.status_code,
                details=e.details,
                state_path=[state.name for state in machine.history],
            )
            raise
        except Exception as e:
            machine.fail()
            error = self._classifier.from_failure(e)
            log.exception(
                "analysis_failed",
                kind=error.kind.value,
                status_code=error.status_code,
                details=error.details,
                state_path=[state.name for state in machine.history],
            )
            raise error from e
        else:
            log.info(
                "analysis_completed",
                bytes=len(html),
                state_path=[state.name for state in machine.history],
            )
            return html
        finally:
            clear_request_context()

    def check_status(self, url: str) -> StatusCheck:
        """Report where a URL ends up and its HTTP status.

        Callers re-run the analysis against ``final_url`` when a redirect
        is detected.

        Args:
            url: URL to check.

        Returns:
            StatusCheck; status 0 when the host cannot be reached.
        """
        return self._orchestrator.check_status(url)

    def _run(self, url: str, machine: RequestStateMachine) -> str:
        host = self._validate(url, machine)

        cached = self._cache.get(url)
        if cached is not None:
            machine.transition(RequestState.CACHE_HIT)
            rules = self._resolver.rules_for(host)
            machine.transition(RequestState.TRANSFORM)
            html = self._transformer.transform(cached, host, url, rules)
            machine.transition(RequestState.DONE)
            return html

        machine.transition(RequestState.CACHE_MISS)
        machine.transition(RequestState.BLOCKLIST_CHECK)
        if self._blocklist.is_blocked(host):
            machine.transition(RequestState.BLOCKED)
            raise self._classifier.build(ErrorKind.BLOCKED_DOMAIN)

        rules = self._resolver.rules_for(host)
        if self._orchestrator.needs_probe(rules):
            machine.transition(RequestState.STATUS_PROBE)
            self._orchestrator.probe(url)

        machine.transition(RequestState.STRATEGY_LOOP)
        result = self._orchestrator.retrieve(url, rules)

        self._transformer.check_size(result.body, url)

        machine.transition(RequestState.CACHE_STORE)
        self._cache.set(url, result.body)

        machine.transition(RequestState.TRANSFORM)
        html = self._transformer.transform(
            result.body, host, url, rules, fetch_strategy=result.strategy
        )
        machine.transition(RequestState.DONE)
        return html

    def _validate(self, url: str, machine: RequestStateMachine) -> str:
        """Return the normalized host of a well-formed http(s) URL."""
        try:
            parsed = urlparse(url.strip())
            hostname = parsed.hostname
        except ValueError:
            hostname = None
            parsed = None

        if parsed is None or parsed.scheme.lower() not in _ALLOWED_SCHEMES or not hostname:
            machine.transition(RequestState.FAILED)
            raise self._classifier.build(ErrorKind.INVALID_URL)
        return normalize_host(hostname)
