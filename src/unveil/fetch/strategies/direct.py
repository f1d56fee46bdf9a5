"""Direct HTTP retrieval presenting a crawler identity."""

import random

import structlog

from unveil.fetch.client import HttpTransport
from unveil.fetch.constants import (
    CRAWLER_FROM_HEADER,
    CRAWLER_IDENTITY_WEIGHT,
    DEFAULT_REQUEST_HEADERS,
    SOCIAL_REFERRERS,
)
from unveil.fetch.models import FetchResult, StrategyName
from unveil.rules.models import MergedRuleSet


logger = structlog.get_logger()


class DirectFetch:
    """GET the page from its origin with rule-driven headers and cookies."""

    def __init__(
        self,
        transport: HttpTransport,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            transport: Shared HTTP transport.
            rng: Random source for identity rotation (seedable for tests).
        """
        self._transport = transport
        self._rng = rng or random.Random()

    @property
    def name(self) -> StrategyName:
        return StrategyName.DIRECT

    def attempt(self, url: str, rules: MergedRuleSet) -> FetchResult:
        """GET the URL with retries."""
        headers = self.build_headers(rules)
        logger.debug(
            "direct_fetch_started",
            component="fetch",
            url=url,
            as_crawler=rules.as_crawler,
        )
        return self._transport.get(url, headers, StrategyName.DIRECT)

    def build_headers(self, rules: MergedRuleSet) -> dict[str, str]:
        """Build request headers for a fetch.

        Precedence, lowest first: defaults, crawler identity, social
        referrer, rule headers, cookies.

        Args:
            rules: Merged rules for the request host.

        Returns:
            Complete header mapping.
        """
        headers = dict(DEFAULT_REQUEST_HEADERS)
        headers["User-Agent"] = rules.user_agent or self._pick_user_agent(
            rules.as_crawler
        )

        if rules.as_crawler:
            headers["X-Forwarded-For"] = crawler_address(self._rng)
            headers["From"] = CRAWLER_FROM_HEADER

        if rules.social_referrer:
            headers["Referer"] = self._rng.choice(SOCIAL_REFERRERS)

        headers.update(rules.headers)

        cookie = "; ".join(f"{k}={v}" for k, v in rules.active_cookies.items())
        if cookie:
            headers["Cookie"] = cookie

        return headers

    def _pick_user_agent(self, as_crawler: bool) -> str:
        """Rotate among configured identities.

        When presenting as a crawler the primary identity is favored.
        """
        config = self._transport.config
        if as_crawler and self._rng.randrange(100) < CRAWLER_IDENTITY_WEIGHT:
            return config.primary_user_agent
        return self._rng.choice(config.user_agents)


def crawler_address(rng: random.Random) -> str:
    # Googlebot's published 66.249.64.0/19 range
    return f"66.249.{rng.randint(64, 95)}.{rng.randint(1, 254)}"


def crawler_headers(user_agent: str, rng: random.Random) -> dict[str, str]:
    """Default headers presenting the request as the search crawler.

    Used for status probes, which carry no domain rules.

    Args:
        user_agent: Crawler user agent.
        rng: Random source for the forwarded address.

    Returns:
        Header mapping.
    """
    headers = dict(DEFAULT_REQUEST_HEADERS)
    headers["User-Agent"] = user_agent
    headers["X-Forwarded-For"] = crawler_address(rng)
    headers["From"] = CRAWLER_FROM_HEADER
    return headers
