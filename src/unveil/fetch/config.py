"""Configuration models for the fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from unveil.fetch.constants import (
    ARCHIVE_AVAILABILITY_URL,
    CRAWLER_USER_AGENTS,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_PAGE_LOAD_TIMEOUT_SECONDS,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    DEFAULT_SCRIPT_TIMEOUT_SECONDS,
)
from unveil.fetch.models import RetryPolicy


class BrowserConfig(BaseModel):
    """Remote browser automation settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    selenium_host: Annotated[str, Field(min_length=1)] = "localhost:4444"
    page_load_timeout_seconds: Annotated[int, Field(ge=1, le=300)] = (
        DEFAULT_PAGE_LOAD_TIMEOUT_SECONDS
    )
    script_timeout_seconds: Annotated[int, Field(ge=1, le=300)] = (
        DEFAULT_SCRIPT_TIMEOUT_SECONDS
    )

    @property
    def command_executor(self) -> str:
        """WebDriver hub endpoint."""
        if self.selenium_host.startswith(("http://", "https://")):
            return self.selenium_host.rstrip("/")
        return f"http://{self.selenium_host}/wd/hub"


class FetchConfig(BaseModel):
    """Configuration for all fetch strategies.

    Central configuration for timeouts, retry policy, network routing
    and crawler identities.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agents: Annotated[list[str], Field(min_length=1)] = Field(
        default_factory=lambda: list(CRAWLER_USER_AGENTS)
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = (
        DEFAULT_FETCH_TIMEOUT_SECONDS
    )
    probe_timeout_seconds: Annotated[float, Field(ge=0.5, le=60.0)] = (
        DEFAULT_PROBE_TIMEOUT_SECONDS
    )
    max_redirects: Annotated[int, Field(ge=0, le=20)] = DEFAULT_MAX_REDIRECTS
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    dns_servers: list[str] = Field(default_factory=list)
    proxy_url: str | None = None
    verify_tls: bool = True
    archive_availability_url: str = ARCHIVE_AVAILABILITY_URL
    browser: BrowserConfig = Field(default_factory=BrowserConfig)

    @field_validator("proxy_url")
    @classmethod
    def validate_proxy_scheme(cls, v: str | None) -> str | None:
        """Ensure the proxy URL carries a supported scheme."""
        if v is None or not v.strip():
            return None
        if not v.startswith(("http://", "https://", "socks5://")):
            msg = f"Unsupported proxy scheme: {v.split('://', 1)[0]}"
            raise ValueError(msg)
        return v

    @property
    def primary_user_agent(self) -> str:
        """The identity favored when a domain asks to appear as a crawler."""
        return self.user_agents[0]
