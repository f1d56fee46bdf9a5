"""Fetch strategies tried by the orchestrator."""

from unveil.fetch.strategies.archive import ArchiveFetch, strip_archive_chrome
from unveil.fetch.strategies.base import FetchStrategy
from unveil.fetch.strategies.browser import BrowserFetch, build_options, remote_driver
from unveil.fetch.strategies.direct import DirectFetch


__all__ = [
    "ArchiveFetch",
    "BrowserFetch",
    "DirectFetch",
    "FetchStrategy",
    "build_options",
    "remote_driver",
    "strip_archive_chrome",
]
