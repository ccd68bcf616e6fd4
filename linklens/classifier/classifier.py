"""Rule-based link type classification."""

from urllib.parse import urlparse

from linklens.classifier.constants import (
    DOMAIN_RULES,
    HTML_RULES,
    KEYWORD_RULES,
    PATH_RULES,
    LinkType,
)


def _matches_domain(hostname: str, path: str, entry: str) -> bool:
    domain, _, section = entry.partition("/")
    if hostname != domain and not hostname.endswith(f".{domain}"):
        return False
    return not section or path.startswith(f"/{section}")


def _first_keyword_match(
    text: str, rules: tuple[tuple[LinkType, tuple[str, ...]], ...]
) -> LinkType | None:
    for link_type, keywords in rules:
        if any(keyword in text for keyword in keywords):
            return link_type
    return None


def classify_by_domain(url: str) -> LinkType | None:
    """Classify a URL by curated domain lists.

    Args:
        url: Page URL.

    Returns:
        LinkType, or None if the domain is not listed.
    """
    try:
        parsed = urlparse(url.lower())
    except ValueError:
        return None
    hostname = parsed.hostname or ""
    if not hostname:
        return None
    for link_type, domains in DOMAIN_RULES:
        if any(_matches_domain(hostname, parsed.path, entry) for entry in domains):
            return link_type
    return None


def classify_link(
    url: str,
    title: str = "",
    description: str = "",
    html: str = "",
) -> LinkType:
    """Assign a coarse category to a page.

    Rules, first hit wins:
    1. Domain membership
    2. URL path patterns
    3. Keywords in title and description
    4. Markers in the HTML body
    Anything else is OTHER.

    Args:
        url: Page URL.
        title: Extracted title.
        description: Extracted description.
        html: Raw HTML, if the page was HTML.

    Returns:
        LinkType.
    """
    if not url:
        return LinkType.OTHER

    by_domain = classify_by_domain(url)
    if by_domain is not None:
        return by_domain

    by_path = _first_keyword_match(url.lower(), PATH_RULES)
    if by_path is not None:
        return by_path

    combined = f"{title or ''} {description or ''}".lower()
    by_keyword = _first_keyword_match(combined, KEYWORD_RULES)
    if by_keyword is not None:
        return by_keyword

    if html:
        by_html = _first_keyword_match(html.lower(), HTML_RULES)
        if by_html is not None:
            return by_html

    return LinkType.OTHER
