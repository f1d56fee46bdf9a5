"""Unit tests for the command line interface."""

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner
from structlog.testing import capture_logs

from tests.helpers.pages import build_article
from tests.helpers.web import FakeWeb, make_analyzer, make_settings
from unveil import __version__
from unveil.analyzer import Analyzer
from unveil.cache import CacheConfigurationError, CacheStore
from unveil.cli import cli
from unveil.rules import RuleTableError
from unveil.settings import AppSettings


URL = "https://example.com/story"


class LoggingRecorder:
    """Stands in for configure_logging and records its arguments."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def __call__(self, **kwargs: Any) -> None:
        self.calls.append(kwargs)


@pytest.fixture(autouse=True)
def quiet_logs() -> Generator[None, None, None]:
    """Keep log lines out of command output."""
    with capture_logs():
        yield


@pytest.fixture
def web() -> FakeWeb:
    """Upstream serving one article."""
    site = FakeWeb()
    site.add(URL, body=build_article(body='<p class="lead">Lead</p>'))
    return site


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    """Settings with a disk cache under tmp_path."""
    return make_settings(tmp_path / "cache")


@pytest.fixture
def log_recorder(monkeypatch: pytest.MonkeyPatch) -> LoggingRecorder:
    """Keep the CLI from reconfiguring global logging."""
    recorder = LoggingRecorder()
    monkeypatch.setattr("unveil.cli.configure_logging", recorder)
    return recorder


@pytest.fixture
def cli_env(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    web: FakeWeb,
    settings: AppSettings,
    log_recorder: LoggingRecorder,
) -> Analyzer:
    """Route CLI commands to an analyzer backed by the fake web."""
    analyzer = make_analyzer(tmp_path, web)
    monkeypatch.setattr("unveil.cli.get_settings", lambda: settings)
    monkeypatch.setattr("unveil.cli.build_analyzer", lambda s: analyzer)
    return analyzer


@pytest.fixture
def runner() -> CliRunner:
    """Click test runner."""
    return CliRunner()


class TestAnalyzeCommand:
    """Tests for `unveil analyze`."""

    def test_prints_html(self, runner: CliRunner, cli_env: Analyzer) -> None:
        """Test that the cleaned page goes to stdout."""
        result = runner.invoke(cli, ["analyze", URL])

        assert result.exit_code == 0
        assert '<p class="lead">Lead</p>' in result.output
        assert 'data-unveil="brand"' in result.output

    def test_writes_output_file(
        self, runner: CliRunner, cli_env: Analyzer, tmp_path: Path
    ) -> None:
        """Test that --output writes the page to a file."""
        target = tmp_path / "out" / "page.html"

        result = runner.invoke(cli, ["analyze", URL, "--output", str(target)])

        assert result.exit_code == 0
        assert target.is_file()
        html = target.read_text(encoding="utf-8")
        assert '<p class="lead">Lead</p>' in html
        assert f"Wrote {len(html)} characters" in result.output

    def test_error_as_json(self, runner: CliRunner, cli_env: Analyzer) -> None:
        """Test that analysis errors exit 1 with a JSON payload."""
        result = runner.invoke(cli, ["analyze", "ftp://example.com/file"])

        assert result.exit_code == 1
        payload = json.loads(result.output.strip().splitlines()[-1])
        assert payload["error"] == "INVALID_URL"
        assert payload["status_code"] == 400
        assert payload["message"] == "Invalid URL format"

    def test_follow_redirects(
        self, runner: CliRunner, cli_env: Analyzer, web: FakeWeb
    ) -> None:
        """Test that the redirect target is analyzed."""
        web.add("https://example.com/short", status=302, headers={"Location": URL})

        result = runner.invoke(
            cli, ["analyze", "https://example.com/short", "--follow-redirects"]
        )

        assert result.exit_code == 0
        assert "Lead" in result.output
        assert web.calls("GET")[-1] == URL

    def test_logging_options(
        self, runner: CliRunner, cli_env: Analyzer, log_recorder: LoggingRecorder
    ) -> None:
        """Test that --verbose and --no-json-logs reach the logging setup."""
        runner.invoke(cli, ["analyze", URL])
        runner.invoke(cli, ["analyze", URL, "-v", "--no-json-logs"])

        assert log_recorder.calls == [
            {"level": logging.INFO, "json_format": True},
            {"level": logging.DEBUG, "json_format": False},
        ]

    def test_metrics_logged(self, runner: CliRunner, cli_env: Analyzer) -> None:
        """Test that fetch and cache counters are logged after each analysis."""
        with capture_logs() as logs:
            runner.invoke(cli, ["analyze", URL])
            runner.invoke(cli, ["analyze", "ftp://example.com/file"])

        summaries = [e for e in logs if e["event"] == "metrics_summary"]
        assert len(summaries) == 2
        assert summaries[0]["fetch"]["strategy_success_total"] == {"direct": 1}
        assert summaries[0]["cache"]["cache_writes_total"] == 1
        assert summaries[1]["fetch"]["fetch_count"] == 1

    def test_configuration_error(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        settings: AppSettings,
        log_recorder: LoggingRecorder,
    ) -> None:
        """Test that a misconfigured cache stops the command."""

        def fail(s: AppSettings) -> Analyzer:
            raise CacheConfigurationError(
                "S3_BUCKET is required for the s3 cache backend"
            )

        monkeypatch.setattr("unveil.cli.get_settings", lambda: settings)
        monkeypatch.setattr("unveil.cli.build_analyzer", fail)

        result = runner.invoke(cli, ["analyze", URL])

        assert result.exit_code == 1
        assert "Configuration error: S3_BUCKET is required" in result.output

    def test_rule_table_error_details(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        settings: AppSettings,
        log_recorder: LoggingRecorder,
    ) -> None:
        """Test that rule validation errors are listed."""

        def fail(s: AppSettings) -> Analyzer:
            raise RuleTableError(
                [
                    {
                        "loc": "domains.example.com.bogus",
                        "msg": "Extra inputs are not permitted",
                    }
                ],
                "rules/domain_rules.yaml",
            )

        monkeypatch.setattr("unveil.cli.get_settings", lambda: settings)
        monkeypatch.setattr("unveil.cli.build_analyzer", fail)

        result = runner.invoke(cli, ["analyze", URL])

        assert result.exit_code == 1
        assert (
            "domains.example.com.bogus: Extra inputs are not permitted" in result.output
        )


class TestOtherCommands:
    """Tests for status, rules and cache-count."""

    def test_version(self, runner: CliRunner) -> None:
        """Test the version option."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_status(self, runner: CliRunner, cli_env: Analyzer) -> None:
        """Test the status report."""
        result = runner.invoke(cli, ["status", URL])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "final_url": URL,
            "has_redirect": False,
            "http_status": 200,
        }

    def test_rules_for_packaged_domain(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        settings: AppSettings,
        log_recorder: LoggingRecorder,
    ) -> None:
        """Test the merged rules printed for a host without domain rules."""
        monkeypatch.setattr("unveil.cli.get_settings", lambda: settings)

        result = runner.invoke(cli, ["rules", "unknown-host.example"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["has_custom_rules"] is False
        assert payload["matched_domain"] is None
        assert "paywall-overlay" in payload["class_element_remove"]

    def test_rules_from_rules_dir(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        log_recorder: LoggingRecorder,
    ) -> None:
        """Test that RULES_DIR tables are used."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "domain_rules.yaml").write_text(
            "domains:\n  example.com:\n    fetch_strategy: archive\n"
        )
        settings = make_settings(tmp_path / "cache", rules_dir=rules_dir)
        monkeypatch.setattr("unveil.cli.get_settings", lambda: settings)

        result = runner.invoke(cli, ["rules", "www.example.com"])

        payload = json.loads(result.output)
        assert payload["has_custom_rules"] is True
        assert payload["matched_domain"] == "example.com"
        assert payload["fetch_strategy"] == "archive"

    def test_cache_count(
        self,
        runner: CliRunner,
        cli_env: Analyzer,
        settings: AppSettings,
    ) -> None:
        """Test the entry count of a counting backend."""
        runner.invoke(cli, ["analyze", URL])

        result = runner.invoke(cli, ["cache-count"])

        assert result.exit_code == 0
        assert result.output.strip() == "1"

    def test_cache_count_unknown(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        settings: AppSettings,
        log_recorder: LoggingRecorder,
    ) -> None:
        """Test the output for backends that cannot count."""
        storage = MagicMock(spec=["exists", "get", "set"])
        monkeypatch.setattr("unveil.cli.get_settings", lambda: settings)
        monkeypatch.setattr(
            "unveil.cli.create_cache_store", lambda s: CacheStore(storage)
        )

        result = runner.invoke(cli, ["cache-count"])

        assert result.output.strip() == "unknown"

