"""Assembly of a ready-to-use Analyzer from settings."""

import httpx
import structlog

from unveil.analyzer.analyzer import Analyzer
from unveil.cache import CacheStorage, CacheStore, create_storage
from unveil.errors import ErrorClassifier
from unveil.fetch import BrowserConfig, FetchConfig, HttpTransport
from unveil.fetch.orchestrator import FetchOrchestrator
from unveil.fetch.strategies import ArchiveFetch, BrowserFetch, DirectFetch
from unveil.fetch.strategies.browser import DriverFactory, remote_driver
from unveil.i18n import MessageCatalog
from unveil.rules import BlockList, RuleResolver, RuleTables
from unveil.settings import AppSettings
from unveil.transform import ContentTransformer


logger = structlog.get_logger()


def build_fetch_config(settings: AppSettings) -> FetchConfig:
    """Derive the fetch configuration from environment settings.

    Args:
        settings: Application settings.

    Returns:
        Frozen FetchConfig; engine-level knobs keep their defaults.
    """
    return FetchConfig(
        dns_servers=settings.dns_server_list,
        proxy_url=settings.proxy_url,
        verify_tls=settings.verify_tls,
        browser=BrowserConfig(selenium_host=settings.selenium_host),
    )


def build_analyzer(
    settings: AppSettings,
    *,
    rule_tables: RuleTables | None = None,
    storage: CacheStorage | None = None,
    transport: httpx.BaseTransport | None = None,
    driver_factory: DriverFactory = remote_driver,
    fetch_config: FetchConfig | None = None,
) -> Analyzer:
    """Wire every component the Analyzer needs.

    Args:
        settings: Application settings.
        rule_tables: Pre-loaded tables; read from ``rules_dir`` when omitted.
        storage: Cache backend; selected by ``cache_backend`` when omitted.
        transport: httpx transport for all HTTP traffic (for testing).
        driver_factory: WebDriver session factory (for testing).
        fetch_config: Overrides the config derived from settings.

    Returns:
        Analyzer ready to serve requests.

    Raises:
        RuleTableError: If the rule tables are invalid.
        CacheConfigurationError: If the cache backend is misconfigured.
    """
    log = logger.bind(component="analyzer", subcomponent="factory")

    catalog = MessageCatalog(settings.language)
    classifier = ErrorClassifier(catalog)

    tables = rule_tables or RuleTables.load(settings.rules_dir)
    resolver = RuleResolver(tables.global_rules, tables.domain_rules)
    blocklist = BlockList(tables.blocked_domains)

    config = fetch_config or build_fetch_config(settings)
    http = HttpTransport(config, transport=transport)
    orchestrator = FetchOrchestrator(
        http,
        [
            DirectFetch(http),
            ArchiveFetch(http),
            BrowserFetch(config.browser, driver_factory=driver_factory),
        ],
        classifier,
    )

    cache_storage = storage if storage is not None else create_storage(settings)
    cache = CacheStore(cache_storage, disabled=settings.disable_cache)

    transformer = ContentTransformer(
        classifier,
        site_url=settings.site_url,
        site_name=settings.site_name,
        debug=settings.debug_enabled,
    )

    log.info(
        "analyzer_created",
        language=catalog.language,
        cache_backend=type(cache_storage).__name__,
        cache_disabled=settings.disable_cache,
        strategies=[name.value for name in orchestrator.strategy_order],
        domain_rules=len(resolver.domains),
        blocked_domains=len(blocklist),
        debug=settings.debug_enabled,
    )
    return Analyzer(
        resolver=resolver,
        blocklist=blocklist,
        cache=cache,
        orchestrator=orchestrator,
        transformer=transformer,
        classifier=classifier,
    )
