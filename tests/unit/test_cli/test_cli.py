"""Unit tests for the command line interface."""

import json
from unittest.mock import MagicMock, patch

import click
import pytest
import structlog
from click.testing import CliRunner

from linklens import __version__
from linklens.cli.main import _parse_data, _parse_headers, cli
from linklens.service import ExecuteResponse


def _response(success: bool) -> ExecuteResponse:
    return ExecuteResponse(
        success=success,
        http_status=200 if success else 500,
        data={"error": "x"} if not success else {"url": "https://example.com"},
        attempt=1,
    )


@pytest.fixture
def runner() -> CliRunner:
    """Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep log lines out of command output."""
    with patch("linklens.cli.main._setup_logging"):
        structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
        yield
    structlog.reset_defaults()


class TestParsers:
    """Tests for option parsing helpers."""

    def test_parse_headers(self) -> None:
        """Headers split on the first colon."""
        headers = _parse_headers(("Accept: text/html", "X-Url: https://a.b/c"))

        assert headers == {"Accept": "text/html", "X-Url": "https://a.b/c"}

    def test_parse_headers_invalid(self) -> None:
        """Values without a colon are rejected."""
        with pytest.raises(click.BadParameter):
            _parse_headers(("no-colon",))

    def test_parse_data(self) -> None:
        """JSON bodies decode, other text passes through."""
        assert _parse_data('{"a": 1}') == {"a": 1}
        assert _parse_data("plain") == "plain"
        assert _parse_data(None) is None


class TestCommands:
    """Tests for CLI commands."""

    def test_version(self, runner: CliRunner) -> None:
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self, runner: CliRunner) -> None:
        """info prints name, version and settings."""
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        output = json.loads(result.output)
        assert output["name"] == "linklens"
        assert output["version"] == __version__
        assert "max_retries" in output["settings"]

    def test_fetch_success(self, runner: CliRunner) -> None:
        """A successful fetch prints the envelope and exits 0."""
        with (
            patch("linklens.cli.main._build_retriever", return_value=MagicMock()),
            patch(
                "linklens.cli.main.execute_request", return_value=_response(True)
            ) as execute,
        ):
            result = runner.invoke(
                cli,
                ["fetch", "https://example.com", "-X", "post", "-H", "X-A: 1", "-d", '{"k": 2}'],
            )

        assert result.exit_code == 0
        assert json.loads(result.output)["success"] is True
        params = execute.call_args.args[0]
        assert params.url == "https://example.com"
        assert params.method == "post"
        assert params.headers == {"X-A": "1"}
        assert params.data == {"k": 2}

    def test_fetch_failure_exit_code(self, runner: CliRunner) -> None:
        """An unsuccessful fetch exits 1."""
        with (
            patch("linklens.cli.main._build_retriever", return_value=MagicMock()),
            patch("linklens.cli.main.execute_request", return_value=_response(False)),
        ):
            result = runner.invoke(cli, ["fetch", "https://example.com"])

        assert result.exit_code == 1

    def test_batch(self, runner: CliRunner) -> None:
        """batch prints one line per URL and fails if any URL failed."""
        responses = {"https://a.example": _response(True), "https://b.example": _response(False)}

        def fake_execute(params, retriever=None):
            return responses[params.url]

        with (
            patch("linklens.cli.main._build_retriever", return_value=MagicMock()),
            patch("linklens.cli.main.execute_request", side_effect=fake_execute),
        ):
            result = runner.invoke(
                cli, ["batch", "https://a.example", "https://b.example", "-w", "2"]
            )

        lines = [line for line in result.output.splitlines() if line.strip()]
        assert len(lines) == 2
        assert result.exit_code == 1
