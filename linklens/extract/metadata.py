"""HTML metadata extraction.

Turns a raw HTML document into an ExtractedMetadata record: title,
description and the page's representative images.
"""

import re

import structlog
from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict, Field

from linklens.extract.candidates import collect_candidates
from linklens.extract.scoring import pick_primary_image
from linklens.extract.urls import resolve_url


logger = structlog.get_logger()

TITLE_META_SELECTORS = (
    'meta[property="og:title"]',
    'meta[name="og:title"]',
    'meta[name="title"]',
    'meta[property="title"]',
)

DESCRIPTION_META_SELECTORS = (
    'meta[property="og:description"]',
    'meta[name="og:description"]',
    'meta[name="description"]',
    'meta[property="description"]',
)

LOGO_SELECTORS = (
    'img[alt*="logo" i]',
    'img[class*="logo" i]',
    'img[id*="logo" i]',
    ".logo img",
    "#logo img",
    '[class*="brand"] img',
    "header img:first-of-type",
    ".navbar-brand img",
    ".site-logo img",
)

APPLE_TOUCH_RELS = ("apple-touch-icon", "apple-touch-icon-precomposed")

_HTML_MARKER = re.compile(r"<\s*(?:html|head|title)\b", re.IGNORECASE)


class MetadataImages(BaseModel):
    """Representative images of a page.

    Serialized with the field names API clients already consume.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    logo: str | None = None
    primary_image: str | None = Field(default=None, alias="ogImage")
    favicon: str | None = None
    apple_touch_icon: str | None = Field(default=None, alias="appleTouchIcon")

    def any(self) -> bool:
        """Check if at least one image is set."""
        return bool(
            self.logo or self.primary_image or self.favicon or self.apple_touch_icon
        )


class ExtractedMetadata(BaseModel):
    """Structured metadata derived from one HTML document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str | None = None
    description: str | None = None
    images: MetadataImages = Field(default_factory=MetadataImages)

    def with_favicon(self, favicon: str) -> "ExtractedMetadata":
        """Return a copy with the favicon backfilled."""
        images = self.images.model_copy(update={"favicon": favicon})
        return self.model_copy(update={"images": images})


def has_useful_metadata(metadata: ExtractedMetadata | None) -> bool:
    """Check if extraction produced a title, a description or any image."""
    if metadata is None:
        return False
    return bool(metadata.title or metadata.description or metadata.images.any())


def is_html_content_type(content_type: str | None) -> bool:
    """Check if a declared content type is HTML."""
    return "text/html" in (content_type or "").lower()


def looks_like_html(body: str, content_type: str | None) -> bool:
    """Relaxed HTML check.

    Trusts the declared content type, but also sniffs for <html>, <head> or
    <title> because bot shells are often served with the wrong type.

    Args:
        body: Response body.
        content_type: Declared Content-Type header.

    Returns:
        True if the body should be treated as HTML.
    """
    if not body:
        return False
    return is_html_content_type(content_type) or bool(_HTML_MARKER.search(body))


def _clean(value: str | list[str] | None) -> str | None:
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _first_meta_content(soup: BeautifulSoup, selectors: tuple[str, ...]) -> str | None:
    for selector in selectors:
        element = soup.select_one(selector)
        if element is not None:
            content = _clean(element.get("content"))
            if content:
                return content
    return None


def _extract_title(soup: BeautifulSoup) -> str | None:
    title = _first_meta_content(soup, TITLE_META_SELECTORS)
    if title:
        return title
    for tag_name in ("title", "h1"):
        element = soup.find(tag_name)
        if isinstance(element, Tag):
            text = _clean(element.get_text())
            if text:
                return text
    return None


def _rel_tokens(element: Tag) -> list[str]:
    rel = element.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [token.lower() for token in rel]


def _find_icon_href(soup: BeautifulSoup, rels: tuple[str, ...]) -> str | None:
    links = soup.find_all("link", href=True)
    for wanted in rels:
        for link in links:
            if wanted in _rel_tokens(link):
                href = _clean(link.get("href"))
                if href:
                    return href
    return None


def _extract_logo(soup: BeautifulSoup, base_url: str) -> str | None:
    for selector in LOGO_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        logo = resolve_url(_clean(element.get("src")), base_url)
        if logo:
            return logo
    return None


def _extract(html: str, base_url: str) -> ExtractedMetadata:
    soup = BeautifulSoup(html, "lxml")

    title = _extract_title(soup)
    description = _first_meta_content(soup, DESCRIPTION_META_SELECTORS)

    primary_image = pick_primary_image(collect_candidates(soup, base_url))
    favicon = resolve_url(_find_icon_href(soup, ("icon",)), base_url)
    apple_touch_icon = resolve_url(_find_icon_href(soup, APPLE_TOUCH_RELS), base_url)

    # Fixed order: selector match, then primary image, then favicon
    logo = _extract_logo(soup, base_url) or primary_image or favicon

    return ExtractedMetadata(
        title=title,
        description=description,
        images=MetadataImages(
            logo=logo,
            primary_image=primary_image,
            favicon=favicon,
            apple_touch_icon=apple_touch_icon,
        ),
    )


def extract_metadata(html: str, base_url: str) -> ExtractedMetadata:
    """Extract title, description and images from an HTML document.

    Never raises: a document that cannot be parsed yields empty metadata.

    Args:
        html: Raw HTML.
        base_url: URL the document was served from.

    Returns:
        ExtractedMetadata.
    """
    if not html:
        return ExtractedMetadata()
    try:
        return _extract(html, base_url)
    except Exception as e:  # noqa: BLE001
        logger.debug(
            "metadata_extraction_failed",
            component="extract",
            base_url=base_url,
            error=str(e),
        )
        return ExtractedMetadata()
