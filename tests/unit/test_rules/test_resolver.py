"""Unit tests for rule resolution and merging."""

import pytest

from unveil.fetch.models import BrowserEngine, StrategyName
from unveil.rules import (
    DomainRuleSet,
    DomainRuleTable,
    GlobalRuleSet,
    RuleCategory,
    RuleResolver,
    host_suffixes,
    normalize_host,
)


@pytest.fixture
def global_rules() -> GlobalRuleSet:
    """Global rules with two groups per category."""
    return GlobalRuleSet(
        class_element_remove={
            "paywall": ["paywall-overlay", "premium-article"],
            "social": ["social-share"],
        },
        script_tag_remove={
            "tracking": ["ga.js", "fbevents.js"],
            "cookies": ["gdpr"],
        },
        id_element_remove={"overlays": ["modal-root"]},
    )


@pytest.fixture
def domain_rules() -> DomainRuleTable:
    """Domain rules covering exclusions, suffix matching and scalars."""
    return DomainRuleTable(
        domains={
            "example.com": DomainRuleSet(
                class_element_remove=["site-wall", "social-share"],
                exclude_global_rules={
                    RuleCategory.CLASS_ELEMENT_REMOVE: ["premium-article"],
                    RuleCategory.SCRIPT_TAG_REMOVE: ["tracking"],
                },
                cookies={"session": "abc", "paywall": None},
                fetch_strategy=StrategyName.ARCHIVE,
            ),
            "news.example.com": DomainRuleSet(
                id_element_remove=["news-banner"],
                browser=BrowserEngine.CHROME,
            ),
            "WWW.Other.ORG": DomainRuleSet(as_crawler=True),
        }
    )


@pytest.fixture
def resolver(global_rules: GlobalRuleSet, domain_rules: DomainRuleTable) -> RuleResolver:
    """Resolver over the fixture tables."""
    return RuleResolver(global_rules, domain_rules)


class TestNormalizeHost:
    """Tests for host normalization."""

    def test_lowercases_and_strips_www(self) -> None:
        """Test that case and a leading www. are ignored."""
        assert normalize_host("WWW.Example.COM") == "example.com"

    def test_strips_only_one_leading_www(self) -> None:
        """Test that www. inside the host is kept."""
        assert normalize_host("www.www2.example.com") == "www2.example.com"
        assert normalize_host("api.www.example.com") == "api.www.example.com"

    def test_strips_trailing_dot(self) -> None:
        """Test that a fully-qualified trailing dot is removed."""
        assert normalize_host("example.com.") == "example.com"


class TestHostSuffixes:
    """Tests for suffix generation."""

    def test_longest_first_without_tld(self) -> None:
        """Test that a.b.c yields a.b.c then b.c."""
        assert host_suffixes("a.b.c") == ["a.b.c", "b.c"]

    def test_two_labels(self) -> None:
        """Test that a registered domain yields only itself."""
        assert host_suffixes("example.com") == ["example.com"]

    def test_single_label(self) -> None:
        """Test that a single-label host yields itself."""
        assert host_suffixes("localhost") == ["localhost"]


class TestMatch:
    """Tests for domain matching."""

    def test_exact_match(self, resolver: RuleResolver) -> None:
        """Test that an exact registered host matches itself."""
        assert resolver.match("example.com") == "example.com"

    def test_exact_match_beats_parent(self, resolver: RuleResolver) -> None:
        """Test that a registered subdomain wins over its parent."""
        assert resolver.match("news.example.com") == "news.example.com"

    def test_longest_suffix_wins(self, resolver: RuleResolver) -> None:
        """Test that deeper hosts use the longest registered suffix."""
        assert resolver.match("live.news.example.com") == "news.example.com"
        assert resolver.match("blog.example.com") == "example.com"

    def test_www_and_case_ignored(self, resolver: RuleResolver) -> None:
        """Test that www. and case do not affect matching."""
        assert resolver.match("WWW.EXAMPLE.COM") == "example.com"
        assert resolver.match("other.org") == "other.org"

    def test_no_match(self, resolver: RuleResolver) -> None:
        """Test that unrelated hosts do not match."""
        assert resolver.match("example.net") is None
        assert resolver.match("notexample.com") is None

    def test_domains_view(self, resolver: RuleResolver) -> None:
        """Test that registered keys are normalized."""
        assert resolver.domains == frozenset(
            {"example.com", "news.example.com", "other.org"}
        )


class TestResolve:
    """Tests for merged rule resolution."""

    def test_domain_items_first_then_globals(self, resolver: RuleResolver) -> None:
        """Test merge order and de-duplication."""
        merged = resolver.resolve("example.com")

        assert merged is not None
        assert merged.class_element_remove == [
            "site-wall",
            "social-share",
            "paywall-overlay",
        ]

    def test_item_exclusion(self, resolver: RuleResolver) -> None:
        """Test that a single excluded global item is dropped."""
        merged = resolver.resolve("example.com")

        assert merged is not None
        assert "premium-article" not in merged.class_element_remove

    def test_group_exclusion(self, resolver: RuleResolver) -> None:
        """Test that naming a group drops all of its items."""
        merged = resolver.resolve("example.com")

        assert merged is not None
        assert merged.script_tag_remove == ["gdpr"]

    def test_unexcluded_categories_keep_globals(self, resolver: RuleResolver) -> None:
        """Test that categories without exclusions keep every global item."""
        merged = resolver.resolve("news.example.com")

        assert merged is not None
        assert merged.id_element_remove == ["news-banner", "modal-root"]
        assert merged.script_tag_remove == ["ga.js", "fbevents.js", "gdpr"]

    def test_scalars_carried(self, resolver: RuleResolver) -> None:
        """Test that domain scalar fields reach the merged set."""
        merged = resolver.resolve("example.com")

        assert merged is not None
        assert merged.matched_domain == "example.com"
        assert merged.fetch_strategy == StrategyName.ARCHIVE
        assert merged.browser == BrowserEngine.FIREFOX
        assert merged.has_custom_rules is True

    def test_subdomain_gets_own_scalars(self, resolver: RuleResolver) -> None:
        """Test that a matched subdomain does not inherit its parent's rules."""
        merged = resolver.resolve("news.example.com")

        assert merged is not None
        assert merged.browser == BrowserEngine.CHROME
        assert merged.fetch_strategy is None

    def test_no_match_returns_none(self, resolver: RuleResolver) -> None:
        """Test that unregistered hosts resolve to None."""
        assert resolver.resolve("unknown.net") is None

    def test_resolution_is_pure(self, resolver: RuleResolver) -> None:
        """Test that repeated resolutions are equal and independent."""
        first = resolver.resolve("example.com")
        second = resolver.resolve("example.com")

        assert first == second
        assert first is not second


class TestRulesFor:
    """Tests for the global-only fallback."""

    def test_falls_back_to_globals(self, resolver: RuleResolver) -> None:
        """Test that unmatched hosts get every global item."""
        merged = resolver.rules_for("unknown.net")

        assert merged.matched_domain is None
        assert merged.has_custom_rules is False
        assert merged.class_element_remove == [
            "paywall-overlay",
            "premium-article",
            "social-share",
        ]
        assert merged.fetch_strategy is None

    def test_global_only_equals_fallback(self, resolver: RuleResolver) -> None:
        """Test that global_only matches the unmatched-host result."""
        assert resolver.global_only() == resolver.rules_for("unknown.net")

    def test_matched_host_returns_domain_rules(self, resolver: RuleResolver) -> None:
        """Test that matched hosts get the domain-merged set."""
        assert resolver.rules_for("www.other.org").as_crawler is True


class TestCookies:
    """Tests for cookie directives."""

    def test_cleared_cookies_not_active(self, resolver: RuleResolver) -> None:
        """Test that a None cookie value is never sent."""
        merged = resolver.rules_for("example.com")

        assert merged.cookies == {"session": "abc", "paywall": None}
        assert merged.active_cookies == {"session": "abc"}


class TestDomainRuleSet:
    """Tests for domain rule validation."""

    def test_blank_strings_become_none(self) -> None:
        """Test that empty overrides count as unset."""
        rules = DomainRuleSet(user_agent="  ", custom_code="", custom_style="\n")

        assert rules.user_agent is None
        assert rules.custom_code is None
        assert rules.custom_style is None

    def test_unknown_field_rejected(self) -> None:
        """Test that typos in rule tables fail validation."""
        with pytest.raises(ValueError, match="Extra inputs"):
            DomainRuleSet.model_validate({"idElementRemove": ["x"]})

    def test_unknown_strategy_rejected(self) -> None:
        """Test that fetch_strategy must name a real strategy."""
        with pytest.raises(ValueError, match="fetch_strategy"):
            DomainRuleSet.model_validate({"fetch_strategy": "teleport"})
