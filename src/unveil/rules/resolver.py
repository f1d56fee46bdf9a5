"""Resolution and merging of global and per-domain rules."""

from collections.abc import Iterable
from types import MappingProxyType

import structlog

from unveil.rules.models import (
    DomainRuleSet,
    DomainRuleTable,
    GlobalRuleSet,
    MergedRuleSet,
    RuleCategory,
    normalize_host,
)


logger = structlog.get_logger()


class RuleResolver:
    """Finds the rule set registered for a host and merges it with globals.

    Resolution is a pure function of the host and the tables given at
    construction; nothing is cached between calls.
    """

    def __init__(self, global_rules: GlobalRuleSet, domain_rules: DomainRuleTable) -> None:
        """Initialize the resolver.

        Args:
            global_rules: Rules applied to every page.
            domain_rules: Rules keyed by normalized domain.
        """
        self._global_rules = global_rules
        self._domains = MappingProxyType(dict(domain_rules.domains))

    @property
    def domains(self) -> frozenset[str]:
        """Registered domain keys."""
        return frozenset(self._domains)

    def match(self, host: str) -> str | None:
        """Find the registered domain that applies to a host.

        An exact match wins; otherwise the longest registered dot-suffix.

        Args:
            host: Host name, any case, with or without ``www.``.

        Returns:
            The matching domain key, or None.
        """
        normalized = normalize_host(host)
        if not normalized:
            return None
        for candidate in host_suffixes(normalized):
            if candidate in self._domains:
                return candidate
        return None

    def resolve(self, host: str) -> MergedRuleSet | None:
        """Resolve the merged rules for a host.

        Args:
            host: Host name.

        Returns:
            Merged rules, or None when no domain rule matches.
        """
        domain = self.match(host)
        if domain is None:
            return None
        logger.debug("domain_rules_matched", component="rules", host=host, domain=domain)
        return self._merge(domain, self._domains[domain])

    def rules_for(self, host: str) -> MergedRuleSet:
        """Resolve rules for a host, falling back to global rules only.

        Args:
            host: Host name.

        Returns:
            Merged rules; ``matched_domain`` is None when only globals apply.
        """
        return self.resolve(host) or self.global_only()

    def global_only(self) -> MergedRuleSet:
        """Build the rule set used when no domain rule matches."""
        return self._merge(None, DomainRuleSet())

    def _merge(self, domain: str | None, rules: DomainRuleSet) -> MergedRuleSet:
        categories = {
            category.value: self._merge_category(category, rules)
            for category in RuleCategory
        }
        return MergedRuleSet(
            matched_domain=domain,
            remove_custom_attr=_dedupe(rules.remove_custom_attr),
            class_attr_remove=_dedupe(rules.class_attr_remove),
            user_agent=rules.user_agent,
            headers=dict(rules.headers),
            cookies=dict(rules.cookies),
            custom_code=rules.custom_code,
            custom_style=rules.custom_style,
            url_mods=rules.url_mods,
            fetch_strategy=rules.fetch_strategy,
            browser=rules.browser,
            as_crawler=rules.as_crawler,
            social_referrer=rules.social_referrer,
            fix_relative_urls=rules.fix_relative_urls,
            **categories,
        )

    def _merge_category(self, category: RuleCategory, rules: DomainRuleSet) -> list[str]:
        """Domain items first, then globals that are not excluded.

        An exclusion names either a single global item or a whole group.
        """
        excluded = set(rules.exclude_global_rules.get(category, []))
        global_items: list[str] = []
        for group, items in self._global_rules.groups(category).items():
            if group in excluded:
                continue
            global_items.extend(item for item in items if item not in excluded)
        return _dedupe([*rules.items(category), *global_items])


def host_suffixes(host: str) -> list[str]:
    """List the host and its parent domains, longest first.

    Bare top-level labels are never produced: ``a.b.c`` yields
    ``a.b.c`` and ``b.c``.

    Args:
        host: Normalized host.

    Returns:
        Candidate domains ordered longest-first.
    """
    labels = host.split(".")
    return [".".join(labels[i:]) for i in range(len(labels) - 1)] or [host]


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result
