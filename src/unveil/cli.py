"""CLI commands for unveil."""

import json
import logging
import sys
from pathlib import Path

import click
import structlog

from unveil import __version__
from unveil.analyzer import build_analyzer
from unveil.cache import (
    CacheConfigurationError,
    CacheMetrics,
    create_cache_store,
)
from unveil.errors import AnalysisError
from unveil.fetch import FetchMetrics
from unveil.observability import configure_logging, level_from_name
from unveil.rules import RuleResolver, RuleTableError, RuleTables
from unveil.settings import AppSettings, get_settings


logger = structlog.get_logger()


def _setup_logging(settings: AppSettings, json_logs: bool, verbose: bool) -> None:
    level = logging.DEBUG if verbose else level_from_name(settings.log_level)
    configure_logging(level=level, json_format=json_logs)


def _log_metrics(log: structlog.stdlib.BoundLogger) -> None:
    fetch = FetchMetrics.get_instance()
    log.info(
        "metrics_summary",
        fetch=fetch.to_dict(),
        avg_fetch_ms=round(fetch.avg_duration_ms, 1),
        cache=CacheMetrics.get_instance().to_dict(),
    )


def _fail_configuration(error: Exception) -> None:
    click.echo(f"Configuration error: {error}", err=True)
    if isinstance(error, RuleTableError):
        for entry in error.errors:
            click.echo(f"  - {entry.get('loc', '')}: {entry.get('msg', '')}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Fetch web pages and strip their access barriers."""


@cli.command()
@click.argument("url")
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the HTML to a file instead of stdout.",
)
@click.option(
    "--follow-redirects",
    is_flag=True,
    help="Check the URL first and analyze the redirect target instead.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def analyze(
    url: str,
    output_path: Path | None,
    follow_redirects: bool,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Fetch URL, apply its rules and print the cleaned HTML.

    On failure the error is printed as JSON on stderr and the exit
    status is 1.
    """
    settings = get_settings()
    _setup_logging(settings, json_logs, verbose)
    log = logger.bind(component="cli", command="analyze")

    try:
        analyzer = build_analyzer(settings)
    except (RuleTableError, CacheConfigurationError) as e:
        _fail_configuration(e)
        return

    target = url
    if follow_redirects:
        status = analyzer.check_status(url)
        if status.has_redirect:
            log.info("redirect_followed", url=url, final_url=status.final_url)
            target = status.final_url

    try:
        html = analyzer.analyze(target)
    except AnalysisError as e:
        click.echo(json.dumps(e.to_dict(), ensure_ascii=False), err=True)
        sys.exit(1)
    finally:
        _log_metrics(log)

    if output_path is None:
        click.echo(html)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    click.echo(f"Wrote {len(html)} characters to {output_path}", err=True)


@cli.command()
@click.argument("url")
def status(url: str) -> None:
    """Print the final URL and HTTP status of URL as JSON."""
    settings = get_settings()
    configure_logging(level=logging.WARNING, json_format=False)

    try:
        analyzer = build_analyzer(settings)
    except (RuleTableError, CacheConfigurationError) as e:
        _fail_configuration(e)
        return

    result = analyzer.check_status(url)
    click.echo(json.dumps(result.model_dump(mode="json"), indent=2))


@cli.command()
@click.argument("host")
def rules(host: str) -> None:
    """Print the merged rule set that applies to HOST as JSON."""
    settings = get_settings()
    configure_logging(level=logging.WARNING, json_format=False)

    try:
        tables = RuleTables.load(settings.rules_dir)
    except RuleTableError as e:
        _fail_configuration(e)
        return

    merged = RuleResolver(tables.global_rules, tables.domain_rules).rules_for(host)
    output = merged.model_dump(mode="json")
    output["has_custom_rules"] = merged.has_custom_rules
    click.echo(json.dumps(output, indent=2, ensure_ascii=False))


@cli.command("cache-count")
def cache_count() -> None:
    """Print the number of cached pages, when the backend can count them."""
    settings = get_settings()
    configure_logging(level=logging.WARNING, json_format=False)

    try:
        store = create_cache_store(settings)
    except CacheConfigurationError as e:
        _fail_configuration(e)
        return

    count = store.count()
    click.echo("unknown" if count is None else str(count))
