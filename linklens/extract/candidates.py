"""Image candidate collection from parsed HTML.

Candidates are gathered from every place a page tends to advertise an image,
in descending order of trust. The collector keeps the first occurrence of each
absolute URL, so a URL advertised in a meta tag keeps that provenance even if
it also appears in an <img> further down.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bs4 import BeautifulSoup, Tag

from linklens.extract.urls import resolve_url


class ImageSourceKind(str, Enum):
    """Where an image candidate was found."""

    META_TAG = "meta-tag"
    STRUCTURED_DATA = "structured-data"
    RESPONSIVE_SRCSET = "responsive-srcset"
    RESPONSIVE_MAP = "responsive-map"
    IMG_ATTRIBUTE = "img-attribute"
    POSTER = "poster"
    LINK_TAG = "link-tag"
    CSS_BACKGROUND = "css-background"
    INLINE_SCRIPT = "inline-script"


META_IMAGE_SELECTOR = ", ".join(
    (
        'meta[property="og:image"]',
        'meta[property="og:image:url"]',
        'meta[property="og:image:secure_url"]',
        'meta[name="og:image"]',
        'meta[property="twitter:image"]',
        'meta[name="twitter:image"]',
        'meta[property="twitter:image:src"]',
        'meta[name="twitter:image:src"]',
    )
)

IMG_URL_ATTRIBUTES = (
    "src",
    "data-src",
    "data-original",
    "data-lazy-src",
    "data-lazy",
    "data-zoom-image",
    "data-hires",
    "data-image",
    "data-large_image",
    "data-fullsize",
    "data-old-hires",
)

# JSON-LD keys that carry an image reference
STRUCTURED_IMAGE_KEYS = (
    "image",
    "thumbnailUrl",
    "primaryImageOfPage",
    "logo",
    "contentUrl",
)

MAX_STRUCTURED_DATA_DEPTH = 16
MAX_SCRIPT_MATCHES = 20

_SRCSET_ENTRY = re.compile(r"^(\S+)\s+(\d+)w", re.IGNORECASE)
_CSS_URL = re.compile(r"url\((['\"]?)([^'\")]+)\1\)", re.IGNORECASE)
_SCRIPT_IMAGE_URL = re.compile(
    r"(https?:[^\"'\s<>]+\.(?:png|jpe?g|webp|gif))", re.IGNORECASE
)


@dataclass(frozen=True)
class ImageCandidate:
    """An absolute image URL and what is known about it."""

    url: str
    source: ImageSourceKind
    width: int = 0
    height: int = 0


class CandidateCollector:
    """Ordered set of image candidates keyed by absolute URL."""

    def __init__(self, base_url: str) -> None:
        """Initialize the collector.

        Args:
            base_url: Page URL used to resolve relative references.
        """
        self._base_url = base_url
        self._candidates: dict[str, ImageCandidate] = {}

    def add(
        self,
        raw_url: Any,
        source: ImageSourceKind,
        width: int = 0,
        height: int = 0,
    ) -> bool:
        """Admit a candidate if it resolves and has not been seen.

        Returns:
            True if the candidate was admitted.
        """
        if not isinstance(raw_url, str):
            return False
        absolute = resolve_url(raw_url, self._base_url)
        if absolute is None or absolute in self._candidates:
            return False
        self._candidates[absolute] = ImageCandidate(
            url=absolute, source=source, width=width, height=height
        )
        return True

    @property
    def candidates(self) -> list[ImageCandidate]:
        """Candidates in admission order."""
        return list(self._candidates.values())

    def __len__(self) -> int:
        return len(self._candidates)


def _attr(element: Tag, name: str) -> str | None:
    value = element.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def collect_meta_images(soup: BeautifulSoup, collector: CandidateCollector) -> None:
    """Collect og:image and twitter:image meta tags."""
    for element in soup.select(META_IMAGE_SELECTOR):
        collector.add(_attr(element, "content"), ImageSourceKind.META_TAG)


def _push_structured_value(value: Any, collector: CandidateCollector) -> None:
    if isinstance(value, str):
        collector.add(value, ImageSourceKind.STRUCTURED_DATA)
    elif isinstance(value, list):
        for item in value:
            if isinstance(item, str):
                collector.add(item, ImageSourceKind.STRUCTURED_DATA)
            elif isinstance(item, dict):
                collector.add(item.get("url"), ImageSourceKind.STRUCTURED_DATA)
    elif isinstance(value, dict):
        collector.add(value.get("url"), ImageSourceKind.STRUCTURED_DATA)


def visit_structured_data(
    node: Any,
    collector: CandidateCollector,
    depth: int = 0,
) -> None:
    """Walk a parsed JSON-LD value and admit every image reference.

    Covers nested objects, arrays and @graph collections. Recursion stops at
    MAX_STRUCTURED_DATA_DEPTH so hostile documents cannot blow the stack.

    Args:
        node: Parsed JSON value.
        collector: Candidate collector.
        depth: Current nesting depth.
    """
    if depth > MAX_STRUCTURED_DATA_DEPTH:
        return

    if isinstance(node, list):
        for item in node:
            visit_structured_data(item, collector, depth + 1)
        return

    if not isinstance(node, dict):
        return

    for key in STRUCTURED_IMAGE_KEYS:
        _push_structured_value(node.get(key), collector)

    for value in node.values():
        if isinstance(value, (dict, list)):
            visit_structured_data(value, collector, depth + 1)


def collect_structured_data_images(
    soup: BeautifulSoup, collector: CandidateCollector
) -> None:
    """Collect image references from application/ld+json blocks."""
    for script in soup.select('script[type="application/ld+json"]'):
        text = script.get_text().strip()
        if not text:
            continue
        try:
            data = json.loads(text)
        except ValueError:
            continue
        visit_structured_data(data, collector)


def collect_srcset_images(soup: BeautifulSoup, collector: CandidateCollector) -> None:
    """Collect width-described entries of srcset attributes."""
    for element in soup.select("picture source[srcset], img[srcset]"):
        srcset = _attr(element, "srcset") or ""
        for part in srcset.split(","):
            match = _SRCSET_ENTRY.match(part.strip())
            if match:
                collector.add(
                    match.group(1),
                    ImageSourceKind.RESPONSIVE_SRCSET,
                    width=_to_int(match.group(2)),
                )


def collect_dynamic_image_maps(
    soup: BeautifulSoup, collector: CandidateCollector
) -> None:
    """Collect data-a-dynamic-image maps of url -> [width, height]."""
    for element in soup.select("img[data-a-dynamic-image]"):
        raw = _attr(element, "data-a-dynamic-image")
        if not raw:
            continue
        try:
            mapping = json.loads(raw)
        except ValueError:
            continue
        if not isinstance(mapping, dict):
            continue
        for url, dims in mapping.items():
            width = height = 0
            if isinstance(dims, list) and len(dims) >= 2:  # noqa: PLR2004
                width, height = _to_int(dims[0]), _to_int(dims[1])
            collector.add(url, ImageSourceKind.RESPONSIVE_MAP, width, height)


def collect_img_attributes(soup: BeautifulSoup, collector: CandidateCollector) -> None:
    """Collect src and lazy-load attributes of <img> elements."""
    for element in soup.find_all("img"):
        for name in IMG_URL_ATTRIBUTES:
            collector.add(_attr(element, name), ImageSourceKind.IMG_ATTRIBUTE)


def collect_posters(soup: BeautifulSoup, collector: CandidateCollector) -> None:
    """Collect <video poster> attributes."""
    for element in soup.select("video[poster]"):
        collector.add(_attr(element, "poster"), ImageSourceKind.POSTER)


def collect_link_images(soup: BeautifulSoup, collector: CandidateCollector) -> None:
    """Collect link rel=image_src and image preloads."""
    for element in soup.select('link[rel="image_src"], link[rel="preload"][as="image"]'):
        collector.add(_attr(element, "href"), ImageSourceKind.LINK_TAG)


def collect_css_backgrounds(
    soup: BeautifulSoup, collector: CandidateCollector
) -> None:
    """Collect inline style background-image URLs."""
    for element in soup.select('[style*="background-image"]'):
        match = _CSS_URL.search(_attr(element, "style") or "")
        if match:
            collector.add(match.group(2), ImageSourceKind.CSS_BACKGROUND)


def collect_script_urls(soup: BeautifulSoup, collector: CandidateCollector) -> None:
    """Scrape image-looking URLs out of inline scripts."""
    for script in soup.find_all("script"):
        text = script.string or script.get_text() or ""
        for count, match in enumerate(_SCRIPT_IMAGE_URL.finditer(text)):
            if count >= MAX_SCRIPT_MATCHES:
                break
            collector.add(match.group(1), ImageSourceKind.INLINE_SCRIPT)


COLLECTORS = (
    collect_meta_images,
    collect_structured_data_images,
    collect_srcset_images,
    collect_dynamic_image_maps,
    collect_img_attributes,
    collect_posters,
    collect_link_images,
    collect_css_backgrounds,
    collect_script_urls,
)


def collect_candidates(soup: BeautifulSoup, base_url: str) -> list[ImageCandidate]:
    """Run every collector over a document.

    Args:
        soup: Parsed document.
        base_url: Page URL.

    Returns:
        Candidates in admission order.
    """
    collector = CandidateCollector(base_url)
    for collect in COLLECTORS:
        collect(soup, collector)
    return collector.candidates
