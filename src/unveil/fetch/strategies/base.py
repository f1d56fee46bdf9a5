"""Fetch strategy protocol."""

from typing import Protocol

from unveil.fetch.models import FetchResult, StrategyName
from unveil.rules.models import MergedRuleSet


class FetchStrategy(Protocol):
    """One way of retrieving a page.

    Implementations report network-level failures through the returned
    FetchResult instead of raising.
    """

    @property
    def name(self) -> StrategyName:
        """Strategy identifier."""
        ...

    def attempt(self, url: str, rules: MergedRuleSet) -> FetchResult:
        """Try to retrieve a page.

        Args:
            url: URL to retrieve, already rewritten by the rules.
            rules: Merged rules for the URL's host.

        Returns:
            FetchResult carrying the body or a structured failure.
        """
        ...
