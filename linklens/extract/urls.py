"""Absolute URL resolution for extracted resources."""

from urllib.parse import urljoin, urlparse


_WEB_SCHEMES = ("http", "https")


def resolve_url(url: str | None, base_url: str) -> str | None:
    """Resolve a possibly-relative resource URL against the page URL.

    Already-absolute URLs pass through untouched, protocol-relative URLs
    inherit the page scheme, everything else is joined with the page URL.
    Anything that does not end up as an http(s) URL with a host is dropped.

    Args:
        url: Raw attribute value.
        base_url: URL of the page the value came from.

    Returns:
        Absolute URL, or None if it cannot be resolved.
    """
    if not url:
        return None
    candidate = url.strip()
    if not candidate:
        return None

    lowered = candidate.lower()
    if lowered.startswith(("http://", "https://")):
        return candidate

    try:
        base = urlparse(base_url)
        if candidate.startswith("//"):
            if base.scheme not in _WEB_SCHEMES:
                return None
            resolved = f"{base.scheme}:{candidate}"
        else:
            resolved = urljoin(base_url, candidate)
        parsed = urlparse(resolved)
    except ValueError:
        return None

    if parsed.scheme not in _WEB_SCHEMES or not parsed.netloc:
        return None
    return resolved


def hostname_of(url: str) -> str:
    """Get the lower-cased hostname of a URL, or an empty string."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def site_root(url: str) -> str | None:
    """Get `{scheme}://{host}` for a URL, or None if it has no host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    return f"{parsed.scheme}://{parsed.hostname}"
