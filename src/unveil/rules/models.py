"""Rule table models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from unveil.fetch.models import BrowserEngine, StrategyName


class RuleCategory(str, Enum):
    """Rule categories that exist both globally and per domain."""

    ID_ELEMENT_REMOVE = "id_element_remove"
    CLASS_ELEMENT_REMOVE = "class_element_remove"
    SCRIPT_TAG_REMOVE = "script_tag_remove"
    REMOVE_ELEMENTS_BY_TAG = "remove_elements_by_tag"


class QueryMod(BaseModel):
    """Replacement of one query parameter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(min_length=1)
    value: str


class UrlMods(BaseModel):
    """Request URL modifications applied before fetching."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    query: list[QueryMod] = Field(default_factory=list)


class DomainRuleSet(BaseModel):
    """Rules registered for a single domain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    cookies: dict[str, str | None] = Field(default_factory=dict)
    id_element_remove: list[str] = Field(default_factory=list)
    class_element_remove: list[str] = Field(default_factory=list)
    script_tag_remove: list[str] = Field(default_factory=list)
    remove_elements_by_tag: list[str] = Field(default_factory=list)
    remove_custom_attr: list[str] = Field(default_factory=list)
    class_attr_remove: list[str] = Field(default_factory=list)
    custom_code: str | None = None
    custom_style: str | None = None
    url_mods: UrlMods | None = None
    fetch_strategy: StrategyName | None = None
    browser: BrowserEngine = BrowserEngine.FIREFOX
    as_crawler: bool = False
    social_referrer: bool = False
    fix_relative_urls: bool = False
    exclude_global_rules: dict[RuleCategory, list[str]] = Field(default_factory=dict)

    @field_validator("user_agent", "custom_code", "custom_style")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank strings as unset."""
        if v is None or not v.strip():
            return None
        return v

    def items(self, category: RuleCategory) -> list[str]:
        """Get this domain's own items for a category.

        Args:
            category: Rule category.

        Returns:
            Items in declaration order.
        """
        return list(getattr(self, category.value))


class GlobalRuleSet(BaseModel):
    """Rules applied to every page, grouped by purpose within each category."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id_element_remove: dict[str, list[str]] = Field(default_factory=dict)
    class_element_remove: dict[str, list[str]] = Field(default_factory=dict)
    script_tag_remove: dict[str, list[str]] = Field(default_factory=dict)
    remove_elements_by_tag: dict[str, list[str]] = Field(default_factory=dict)

    def groups(self, category: RuleCategory) -> dict[str, list[str]]:
        """Get the named groups of a category.

        Args:
            category: Rule category.

        Returns:
            Mapping of group name to items.
        """
        return dict(getattr(self, category.value) or {})


class DomainRuleTable(BaseModel):
    """All per-domain rules keyed by normalized domain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    domains: dict[str, DomainRuleSet] = Field(default_factory=dict)

    @field_validator("domains")
    @classmethod
    def normalize_keys(cls, v: dict[str, DomainRuleSet]) -> dict[str, DomainRuleSet]:
        """Lowercase keys and drop a leading www."""
        normalized: dict[str, DomainRuleSet] = {}
        for key, rules in v.items():
            normalized[normalize_host(key)] = rules
        return normalized


class BlockedDomainTable(BaseModel):
    """Registered domains that are never fetched."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    domains: list[str] = Field(default_factory=list)

    @field_validator("domains")
    @classmethod
    def normalize_domains(cls, v: list[str]) -> list[str]:
        """Normalize and drop blanks."""
        return [normalize_host(d) for d in v if d.strip()]


class MergedRuleSet(BaseModel):
    """Effective rules for one host: globals minus exclusions plus domain rules.

    Built fresh for every resolution and never persisted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    matched_domain: str | None = None
    id_element_remove: list[str] = Field(default_factory=list)
    class_element_remove: list[str] = Field(default_factory=list)
    script_tag_remove: list[str] = Field(default_factory=list)
    remove_elements_by_tag: list[str] = Field(default_factory=list)
    remove_custom_attr: list[str] = Field(default_factory=list)
    class_attr_remove: list[str] = Field(default_factory=list)
    user_agent: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    cookies: dict[str, str | None] = Field(default_factory=dict)
    custom_code: str | None = None
    custom_style: str | None = None
    url_mods: UrlMods | None = None
    fetch_strategy: StrategyName | None = None
    browser: BrowserEngine = BrowserEngine.FIREFOX
    as_crawler: bool = False
    social_referrer: bool = False
    fix_relative_urls: bool = False

    @property
    def has_custom_rules(self) -> bool:
        """Whether a domain rule contributed to this set."""
        return self.matched_domain is not None

    @property
    def active_cookies(self) -> dict[str, str]:
        """Cookies to send; cleared cookies are omitted."""
        return {k: v for k, v in self.cookies.items() if v is not None}


def normalize_host(host: str) -> str:
    """Lowercase a host and strip a single leading ``www.``.

    Args:
        host: Host name.

    Returns:
        Normalized host.
    """
    normalized = host.strip().lower().rstrip(".")
    if normalized.startswith("www."):
        normalized = normalized[4:]
    return normalized
