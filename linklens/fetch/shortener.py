"""Resolution of URL-shortener links to their destination."""

import httpx
import structlog

from linklens.extract.urls import hostname_of
from linklens.fetch.config import FetchConfig
from linklens.fetch.constants import HTTP_STATUS_OK_MAX, SHORTENER_HOSTS
from linklens.fetch.identity import build_identity
from linklens.fetch.redact import redact_url_credentials


logger = structlog.get_logger()


def is_shortener_url(url: str) -> bool:
    """Check if a URL's hostname is a known shortener."""
    return hostname_of(url) in SHORTENER_HOSTS


def resolve_final_url(
    url: str,
    config: FetchConfig,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Follow a short link's redirects to its destination.

    Tries HEAD first and falls back to GET for services that reject HEAD.
    Any failure leaves the URL unchanged; the retrieval loop then simply
    fetches the short link itself.

    Args:
        url: Short link.
        config: Fetch configuration (timeout, redirect limit).
        transport: Optional httpx transport.

    Returns:
        Destination URL, or the input URL if it could not be resolved.
    """
    log = logger.bind(component="shortener", url=redact_url_credentials(url))
    headers = build_identity(url).headers

    try:
        with httpx.Client(
            timeout=config.default_timeout_seconds,
            follow_redirects=True,
            max_redirects=config.max_redirects,
            transport=transport,
        ) as client:
            response = client.head(url, headers=headers)
            if response.status_code >= HTTP_STATUS_OK_MAX:
                response = client.get(url, headers=headers)
    except httpx.RequestError as e:
        log.warning("shortener_resolution_failed", error=str(e))
        return url

    final_url = str(response.url)
    log.info(
        "shortener_resolved",
        final_url=redact_url_credentials(final_url),
        status_code=response.status_code,
    )
    return final_url
