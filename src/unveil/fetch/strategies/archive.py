"""Retrieval of the closest web archive snapshot."""

import json
import random
import re
from urllib.parse import quote

import structlog

from unveil.fetch.client import HttpTransport
from unveil.fetch.constants import DEFAULT_REQUEST_HEADERS
from unveil.fetch.models import FetchErrorClass, FetchResult, RetryPolicy, StrategyName
from unveil.rules.models import MergedRuleSet


logger = structlog.get_logger()

_SINGLE_ATTEMPT = RetryPolicy(max_attempts=1, delay_ms=0)

_TOOLBAR_PATTERN = re.compile(
    rb"<!-- BEGIN WAYBACK TOOLBAR INSERT -->.*?<!-- END WAYBACK TOOLBAR INSERT -->",
    re.DOTALL,
)
_ARCHIVE_PREFIX_PATTERN = re.compile(rb"https?://web\.archive\.org/web/\d+[a-z_]*/")
_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


class ArchiveFetch:
    """Look up the closest archived snapshot and return it without archive chrome."""

    def __init__(
        self,
        transport: HttpTransport,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            transport: Shared HTTP transport.
            rng: Random source for user-agent rotation.
        """
        self._transport = transport
        self._rng = rng or random.Random()

    @property
    def name(self) -> StrategyName:
        return StrategyName.ARCHIVE

    def attempt(self, url: str, rules: MergedRuleSet) -> FetchResult:  # noqa: ARG002
        """Fetch the closest snapshot of ``url``."""
        log = logger.bind(component="fetch", strategy=self.name.value, url=url)
        headers = dict(DEFAULT_REQUEST_HEADERS)
        headers["User-Agent"] = self._rng.choice(self._transport.config.user_agents)

        lookup_url = (
            f"{self._transport.config.archive_availability_url}"
            f"?url={quote(_SCHEME_PATTERN.sub('', url), safe='')}"
        )
        lookup = self._transport.get(
            lookup_url, headers, StrategyName.ARCHIVE, _SINGLE_ATTEMPT
        )
        if lookup.error is not None:
            return FetchResult(
                strategy=StrategyName.ARCHIVE,
                final_url=url,
                status_code=lookup.status_code,
                error=lookup.error,
            )

        snapshot_url = _closest_snapshot(lookup.body)
        if snapshot_url is None:
            log.debug("archive_snapshot_missing")
            return FetchResult.failure(
                StrategyName.ARCHIVE,
                url,
                FetchErrorClass.NOT_FOUND,
                f"No archived snapshot found for {url}",
            )

        log.debug("archive_snapshot_found", snapshot_url=snapshot_url)
        snapshot = self._transport.get(
            snapshot_url, headers, StrategyName.ARCHIVE, _SINGLE_ATTEMPT
        )
        if snapshot.error is not None:
            return snapshot

        return snapshot.model_copy(update={"body": strip_archive_chrome(snapshot.body)})


def strip_archive_chrome(body: bytes) -> bytes:
    """Remove the archive toolbar and rewrite archived links to their originals.

    Args:
        body: Snapshot HTML.

    Returns:
        HTML with the toolbar block and archive URL prefixes removed.
    """
    body = _TOOLBAR_PATTERN.sub(b"", body)
    return _ARCHIVE_PREFIX_PATTERN.sub(b"", body)


def _closest_snapshot(payload: bytes) -> str | None:
    try:
        data = json.loads(payload)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    closest = (data.get("archived_snapshots") or {}).get("closest") or {}
    snapshot_url = closest.get("url") if isinstance(closest, dict) else None
    return snapshot_url or None
