"""Headless browser escalation."""

from linklens.browser.fetcher import (
    RENDER_REQUIRED_DOMAINS,
    BrowserFetcher,
    PlaywrightBrowserFetcher,
    UnavailableBrowserFetcher,
    create_browser_fetcher,
    needs_browser_fetch,
)


__all__ = [
    "RENDER_REQUIRED_DOMAINS",
    "BrowserFetcher",
    "PlaywrightBrowserFetcher",
    "UnavailableBrowserFetcher",
    "create_browser_fetcher",
    "needs_browser_fetch",
]
