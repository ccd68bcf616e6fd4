"""Headless browser escalation for pages static HTTP cannot retrieve.

Playwright is an optional dependency. Callers get a fetcher through
create_browser_fetcher(), which returns an unavailable implementation when
the engine is not installed or escalation is disabled.
"""

import importlib.util
import time
from typing import Protocol

import structlog

from linklens.errors import EscalationUnavailableError
from linklens.extract.urls import hostname_of
from linklens.fetch.models import FetchAttemptResult, RetrievalSession
from linklens.fetch.redact import redact_url_credentials


logger = structlog.get_logger()

# Sites whose content only appears after client-side rendering
RENDER_REQUIRED_DOMAINS = ("blinkit.com",)

NAVIGATION_TIMEOUT_MS = 15000
NETWORK_SETTLE_TIMEOUT_MS = 5000
BROWSER_LOCALE = "en-IN"
BROWSER_TIMEZONE = "Asia/Kolkata"
BROWSER_VIEWPORT = {"width": 1366, "height": 768}
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
RENDERED_CONTENT_TYPE = "text/html; charset=UTF-8"


def needs_browser_fetch(url: str) -> bool:
    """Check if a URL belongs to a site that requires rendering."""
    hostname = hostname_of(url)
    return any(
        hostname == domain or hostname.endswith(f".{domain}")
        for domain in RENDER_REQUIRED_DOMAINS
    )


class BrowserFetcher(Protocol):
    """Renders a page in a real browser engine."""

    @property
    def available(self) -> bool:
        """Check if escalation can be attempted at all."""
        ...

    def fetch(
        self, url: str, session: RetrievalSession | None = None
    ) -> FetchAttemptResult | None:
        """Render a URL and return its HTML, or None if rendering failed."""
        ...


class UnavailableBrowserFetcher:
    """Stand-in used when no browser engine can be used."""

    def __init__(self, reason: str = "browser fetch disabled") -> None:
        self.reason = reason

    @property
    def available(self) -> bool:
        return False

    def fetch(
        self, url: str, session: RetrievalSession | None = None
    ) -> FetchAttemptResult | None:
        logger.debug(
            "browser_unavailable",
            component="browser",
            url=redact_url_credentials(url),
            reason=self.reason,
        )
        return None


class PlaywrightBrowserFetcher:
    """Renders pages with headless Chromium through Playwright's sync API.

    Each fetch launches its own browser and always closes it, including
    when the call is cancelled mid-render.
    """

    def __init__(
        self,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        settle_timeout_ms: int = NETWORK_SETTLE_TIMEOUT_MS,
    ) -> None:
        """Initialize the fetcher.

        Args:
            navigation_timeout_ms: Bound on page navigation.
            settle_timeout_ms: Best-effort bound on waiting for network idle.
        """
        self._navigation_timeout_ms = navigation_timeout_ms
        self._settle_timeout_ms = settle_timeout_ms

    @property
    def available(self) -> bool:
        return True

    def fetch(
        self, url: str, session: RetrievalSession | None = None
    ) -> FetchAttemptResult | None:
        """Render a URL in headless Chromium.

        Args:
            url: Page URL.
            session: Per-call state; checked for cancellation around navigation.

        Returns:
            Rendered page as a 200 text/html result, or None on failure.

        Raises:
            RetrievalCancelledError: If the caller cancelled the call.
        """
        log = logger.bind(component="browser", url=redact_url_credentials(url))
        log.info("browser_fetch_started")

        start_ns = time.perf_counter_ns()
        try:
            html, final_url = self._render(url, session)
        except EscalationUnavailableError as e:
            log.warning("browser_fetch_failed", error=e.message)
            return None
        elapsed_ms = (time.perf_counter_ns() - start_ns) / 1_000_000

        log.info(
            "browser_fetch_complete",
            elapsed_ms=round(elapsed_ms, 2),
            body_length=len(html),
        )
        return FetchAttemptResult(
            status_code=200,
            status_text="OK",
            headers={"content-type": RENDERED_CONTENT_TYPE},
            body_text=html,
            elapsed_ms=elapsed_ms,
            final_url=final_url or url,
        )

    def _render(
        self, url: str, session: RetrievalSession | None
    ) -> tuple[str, str]:
        """Drive the browser for one page.

        Raises:
            EscalationUnavailableError: If the engine failed to render the page.
            RetrievalCancelledError: If the caller cancelled the call.
        """
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
        from playwright.sync_api import sync_playwright

        if session is not None:
            session.check_cancelled()

        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(headless=True)
                try:
                    context = browser.new_context(
                        locale=BROWSER_LOCALE,
                        timezone_id=BROWSER_TIMEZONE,
                        user_agent=BROWSER_USER_AGENT,
                        viewport=BROWSER_VIEWPORT,
                    )
                    page = context.new_page()
                    page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=self._navigation_timeout_ms,
                    )
                    if session is not None:
                        session.check_cancelled()
                    try:
                        page.wait_for_load_state(
                            "networkidle", timeout=self._settle_timeout_ms
                        )
                    except PlaywrightTimeoutError:
                        pass
                    return page.content(), page.url
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise EscalationUnavailableError(str(e), url=url) from e


def create_browser_fetcher(enabled: bool = True) -> BrowserFetcher:
    """Pick a browser fetcher by capability.

    Args:
        enabled: Whether escalation is allowed by configuration.

    Returns:
        PlaywrightBrowserFetcher when Playwright is installed and enabled,
        otherwise UnavailableBrowserFetcher.
    """
    if not enabled:
        return UnavailableBrowserFetcher("browser fetch disabled")
    if importlib.util.find_spec("playwright") is None:
        logger.info("browser_engine_missing", component="browser")
        return UnavailableBrowserFetcher("playwright not installed")
    return PlaywrightBrowserFetcher()
