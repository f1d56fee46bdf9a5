"""Rule tables, resolution and the domain block list."""

from unveil.rules.blocklist import BlockList
from unveil.rules.loader import DEFAULT_RULES_DIR, RuleTableError, RuleTables
from unveil.rules.models import (
    BlockedDomainTable,
    DomainRuleSet,
    DomainRuleTable,
    GlobalRuleSet,
    MergedRuleSet,
    QueryMod,
    RuleCategory,
    UrlMods,
    normalize_host,
)
from unveil.rules.resolver import RuleResolver, host_suffixes


__all__ = [
    "DEFAULT_RULES_DIR",
    "BlockList",
    "BlockedDomainTable",
    "DomainRuleSet",
    "DomainRuleTable",
    "GlobalRuleSet",
    "MergedRuleSet",
    "QueryMod",
    "RuleCategory",
    "RuleResolver",
    "RuleTableError",
    "RuleTables",
    "UrlMods",
    "host_suffixes",
    "normalize_host",
]
