"""Retrieval through a remote automated browser."""

from collections.abc import Callable

import structlog
import urllib3
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.remote.webdriver import WebDriver

from unveil.fetch.config import BrowserConfig
from unveil.fetch.models import (
    BrowserEngine,
    FetchErrorClass,
    FetchResult,
    StrategyName,
)
from unveil.rules.models import MergedRuleSet


logger = structlog.get_logger()

DriverFactory = Callable[[BrowserEngine, BrowserConfig], WebDriver]

_OUTER_HTML_SCRIPT = "return document.documentElement.outerHTML;"

_CHROME_ARGUMENTS = (
    "--headless",
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-images",
    "--blink-settings=imagesEnabled=false",
)

_FIREFOX_PREFERENCES: dict[str, object] = {
    "permissions.default.image": 2,
    "javascript.enabled": True,
    "network.http.referer.defaultPolicy": 0,
    "network.http.referer.defaultReferer": "https://www.google.com",
    "network.http.referer.spoofSource": True,
    "network.http.referer.trimmingPolicy": 0,
}

_DNS_MARKERS = ("dnsnotfound", "err_name_not_resolved", "dns")


def build_options(engine: BrowserEngine) -> ChromeOptions | FirefoxOptions:
    """Build session options for an engine.

    Args:
        engine: Browser engine.

    Returns:
        Selenium options with images disabled.
    """
    if engine == BrowserEngine.CHROME:
        chrome = ChromeOptions()
        for argument in _CHROME_ARGUMENTS:
            chrome.add_argument(argument)
        return chrome

    firefox = FirefoxOptions()
    for key, value in _FIREFOX_PREFERENCES.items():
        firefox.set_preference(key, value)
    return firefox


def remote_driver(engine: BrowserEngine, config: BrowserConfig) -> WebDriver:
    """Open a session on the remote WebDriver hub.

    Args:
        engine: Browser engine.
        config: Browser settings.

    Returns:
        Connected WebDriver.
    """
    return webdriver.Remote(
        command_executor=config.command_executor,
        options=build_options(engine),
    )


class BrowserFetch:
    """Render the page in a remote browser and read back its DOM.

    A session is created for every attempt and always closed.
    """

    def __init__(
        self,
        config: BrowserConfig,
        driver_factory: DriverFactory = remote_driver,
    ) -> None:
        """Initialize the strategy.

        Args:
            config: Browser settings.
            driver_factory: Creates WebDriver sessions (replaceable in tests).
        """
        self._config = config
        self._driver_factory = driver_factory

    @property
    def name(self) -> StrategyName:
        return StrategyName.BROWSER

    def attempt(self, url: str, rules: MergedRuleSet) -> FetchResult:
        """Load the URL in the engine chosen by the rules."""
        log = logger.bind(
            component="fetch",
            strategy=self.name.value,
            url=url,
            engine=rules.browser.value,
        )
        driver: WebDriver | None = None
        try:
            driver = self._driver_factory(rules.browser, self._config)
            driver.set_page_load_timeout(self._config.page_load_timeout_seconds)
            driver.set_script_timeout(self._config.script_timeout_seconds)
            driver.get(url)
            html = driver.execute_script(_OUTER_HTML_SCRIPT)
        except TimeoutException as e:
            return FetchResult.failure(
                self.name,
                url,
                FetchErrorClass.NETWORK_TIMEOUT,
                f"Browser timeout: {_first_line(e)}",
            )
        except WebDriverException as e:
            return FetchResult.failure(
                self.name, url, _classify_driver_error(e), _first_line(e)
            )
        except (OSError, urllib3.exceptions.HTTPError) as e:
            return FetchResult.failure(
                self.name,
                url,
                FetchErrorClass.CONNECTION_ERROR,
                f"Connection to browser hub failed: {_first_line(e)}",
            )
        finally:
            if driver is not None:
                _quit(driver, log)

        if not html or not str(html).strip():
            return FetchResult.failure(
                self.name,
                url,
                FetchErrorClass.EMPTY_CONTENT,
                "Browser returned an empty document",
            )

        return FetchResult(
            strategy=self.name,
            final_url=url,
            status_code=200,
            body=str(html).encode("utf-8"),
        )


def _quit(driver: WebDriver, log: structlog.stdlib.BoundLogger) -> None:
    try:
        driver.quit()
    except WebDriverException as e:
        log.warning("browser_quit_failed", error=_first_line(e))
    else:
        log.debug("browser_session_closed")


def _classify_driver_error(exc: WebDriverException) -> FetchErrorClass:
    text = str(exc).lower()
    if any(marker in text for marker in _DNS_MARKERS):
        return FetchErrorClass.DNS
    if "timeout" in text or "timed out" in text:
        return FetchErrorClass.NETWORK_TIMEOUT
    if "not found" in text:
        return FetchErrorClass.NOT_FOUND
    if "connection refused" in text or "max retries exceeded" in text:
        return FetchErrorClass.CONNECTION_ERROR
    return FetchErrorClass.AUTOMATION


def _first_line(exc: Exception) -> str:
    text = (getattr(exc, "msg", None) or str(exc) or exc.__class__.__name__).strip()
    return text.splitlines()[0] if text else exc.__class__.__name__
