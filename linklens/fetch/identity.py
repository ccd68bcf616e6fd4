"""Randomized browser identities for outbound requests.

Each attempt gets a user agent plus the Accept/Sec-* headers a real browser
with that agent would send, so the fingerprint stays internally consistent.
"""

import random

import httpx
from pydantic import BaseModel, ConfigDict, Field


USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
)

DEFAULT_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.9"
CHROMIUM_SEC_CH_UA = '"Not.A/Brand";v="99", "Chromium";v="120", "Google Chrome";v="120"'


class BrowserIdentity(BaseModel):
    """A user agent and the request headers that go with it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: str = Field(min_length=1)
    headers: dict[str, str] = Field(default_factory=dict)


def random_user_agent(rng: random.Random | None = None) -> str:
    """Pick a user agent from the built-in pool.

    Args:
        rng: Optional random source (for deterministic tests).

    Returns:
        User agent string.
    """
    chooser = rng or random
    return chooser.choice(USER_AGENTS)


def platform_hint(user_agent: str) -> str:
    """Derive the Sec-Ch-Ua-Platform value for a user agent."""
    if "Windows NT" in user_agent:
        return '"Windows"'
    if "Macintosh" in user_agent:
        return '"macOS"'
    if "Linux" in user_agent:
        return '"Linux"'
    return '"Unknown"'


def is_chromium_agent(user_agent: str) -> bool:
    """Check if a user agent belongs to a Chromium-based browser."""
    return "Chrome/" in user_agent or "Edg/" in user_agent


def build_identity(url: str, rng: random.Random | None = None) -> BrowserIdentity:
    """Build a fresh browser identity for a target URL.

    Client hints are only sent for Chromium agents, matching what Firefox
    and Safari actually do.

    Args:
        url: Target URL (used for Origin/Referer).
        rng: Optional random source.

    Returns:
        Immutable BrowserIdentity.

    Raises:
        httpx.InvalidURL: If the URL cannot be parsed.
    """
    user_agent = random_user_agent(rng)
    # Header values must be ASCII: IDN hosts as punycode, IRI paths percent-encoded
    target = httpx.URL(url)
    hostname = target.raw_host.decode("ascii")
    origin = f"{target.scheme}://{hostname}" if hostname else ""

    headers: dict[str, str] = {
        "User-Agent": user_agent,
        "Accept": DEFAULT_ACCEPT,
        "Accept-Language": DEFAULT_ACCEPT_LANGUAGE,
        "Accept-Encoding": "gzip, deflate",
        "DNT": "1",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }
    if is_chromium_agent(user_agent):
        headers["Sec-Ch-Ua"] = CHROMIUM_SEC_CH_UA
        headers["Sec-Ch-Ua-Mobile"] = "?0"
        headers["Sec-Ch-Ua-Platform"] = platform_hint(user_agent)

    headers.update(
        {
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "same-origin" if hostname else "none",
            "Sec-Fetch-User": "?1",
            "Cache-Control": "max-age=0",
            "Referer": str(target),
        }
    )
    if origin:
        headers["Origin"] = origin

    return BrowserIdentity(user_agent=user_agent, headers=headers)
