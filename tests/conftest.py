"""Shared fixtures."""

from collections.abc import Generator

import pytest

from tests.helpers.pages import build_article
from unveil.cache import CacheMetrics
from unveil.fetch import FetchMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None, None, None]:
    """Give every test fresh metrics singletons."""
    FetchMetrics.reset()
    CacheMetrics.reset()
    yield
    FetchMetrics.reset()
    CacheMetrics.reset()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables and .env files out of settings."""
    for name in (
        "SITE_NAME",
        "SITE_URL",
        "LANGUAGE",
        "LOG_LEVEL",
        "DEBUG",
        "DNS_SERVERS",
        "PROXY_URL",
        "VERIFY_TLS",
        "SELENIUM_HOST",
        "RULES_DIR",
        "CACHE_BACKEND",
        "CACHE_DIR",
        "DISABLE_CACHE",
        "REDIS_HOST",
        "REDIS_PORT",
        "REDIS_PREFIX",
        "S3_ACCESS_KEY",
        "S3_SECRET_KEY",
        "S3_BUCKET",
        "S3_REGION",
        "S3_FOLDER",
        "S3_ACL",
        "S3_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def article_html() -> str:
    """A plain article page above the size gate."""
    return build_article()
