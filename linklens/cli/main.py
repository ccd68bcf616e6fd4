"""CLI commands for link retrieval."""

import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed

import click
import structlog

from linklens import __version__
from linklens.browser import create_browser_fetcher
from linklens.fetch.metrics import FetchMetrics
from linklens.observability import configure_logging
from linklens.retrieval import LinkRetriever
from linklens.service import ExecuteParams, ExecuteResponse, execute_request
from linklens.settings import AppSettings, get_settings


logger = structlog.get_logger()

SERVICE_NAME = "linklens"
DEFAULT_BATCH_WORKERS = 4


def _setup_logging(json_logs: bool | None, verbose: bool, settings: AppSettings) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    json_format = settings.json_logs if json_logs is None else json_logs
    configure_logging(level=level, output=sys.stderr, json_format=json_format)


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated `Name: value` options into a mapping."""
    headers: dict[str, str] = {}
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            msg = f"Invalid header '{value}', expected 'Name: value'"
            raise click.BadParameter(msg, param_hint="--header")
        headers[name.strip()] = header_value.strip()
    return headers


def _parse_data(data: str | None) -> object:
    """Decode a JSON body, or keep it as raw text."""
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return data


def _build_retriever(settings: AppSettings) -> LinkRetriever:
    return LinkRetriever.from_settings(settings)


def _echo_response(response: ExecuteResponse, indent: int | None = 2) -> None:
    click.echo(json.dumps(response.to_payload(), indent=indent, ensure_ascii=False))


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Fetch URLs and extract link previews."""


@cli.command()
@click.argument("url")
@click.option(
    "--method",
    "-X",
    default="GET",
    show_default=True,
    help="HTTP method (GET, POST, PUT, DELETE, PATCH, HEAD).",
)
@click.option(
    "--header",
    "-H",
    "header_values",
    multiple=True,
    help="Extra request header as 'Name: value'. Repeatable.",
)
@click.option(
    "--data",
    "-d",
    default=None,
    help="Request body for POST/PUT/PATCH. JSON is sent as JSON.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: LOG_JSON setting).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def fetch(  # noqa: PLR0913
    url: str,
    method: str,
    header_values: tuple[str, ...],
    data: str | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Fetch URL and print its link preview as JSON.

    Exits with status 1 when the preview is not successful.
    """
    settings = get_settings()
    _setup_logging(json_logs, verbose, settings)

    params = ExecuteParams(
        url=url,
        method=method,
        headers=_parse_headers(header_values),
        data=_parse_data(data),
    )
    response = execute_request(params, retriever=_build_retriever(settings))
    _echo_response(response)

    if not response.success:
        sys.exit(1)


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1, max=32),
    default=DEFAULT_BATCH_WORKERS,
    show_default=True,
    help="Number of URLs fetched concurrently.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: LOG_JSON setting).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def batch(
    urls: tuple[str, ...],
    workers: int,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Fetch several URLs concurrently, one JSON line per URL.

    Exits with status 1 when any preview is not successful.
    """
    settings = get_settings()
    _setup_logging(json_logs, verbose, settings)
    retriever = _build_retriever(settings)
    log = logger.bind(component="cli", command="batch")
    log.info("batch_started", url_count=len(urls), workers=workers)

    failures = 0
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_url = {
            executor.submit(
                execute_request, ExecuteParams(url=url), retriever
            ): url
            for url in urls
        }

        for future in as_completed(future_to_url):
            response = future.result()
            if not response.success:
                failures += 1
            _echo_response(response, indent=None)

    log.info(
        "batch_complete",
        url_count=len(urls),
        failures=failures,
        metrics=FetchMetrics.get_instance().to_dict(),
    )
    if failures:
        sys.exit(1)


@cli.command()
def info() -> None:
    """Show service version, features and effective settings."""
    settings = get_settings()
    browser = create_browser_fetcher(settings.browser_fetch_enabled)
    output = {
        "name": SERVICE_NAME,
        "version": __version__,
        "features": {
            "retry_with_backoff": True,
            "sticky_cookies": True,
            "bot_block_detection": True,
            "shortener_resolution": True,
            "platform_metadata": ["youtube", "spotify"],
            "browser_escalation": browser.available,
            "link_classification": True,
        },
        "settings": {
            "max_retries": settings.max_retries,
            "request_timeout_ms": settings.request_timeout_ms,
            "quality_attempts": settings.quality_attempts,
            "platform_timeout_ms": settings.platform_timeout_ms,
        },
    }
    click.echo(json.dumps(output, indent=2))


if __name__ == "__main__":
    cli()
