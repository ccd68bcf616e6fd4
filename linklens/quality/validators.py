"""Per-platform sanity checks for e-commerce product pages.

A product page can come back with HTTP 200, a plausible title and still be
a shell. Each validator recognizes its platform's product URLs and checks
the page for markers only a real product page carries.
"""

import re
from abc import ABC, abstractmethod
from urllib.parse import urlparse

from linklens.extract.metadata import ExtractedMetadata


class ProductPageValidator(ABC):
    """Sanity check for one retailer's product pages."""

    name: str = "product"

    @abstractmethod
    def applies_to(self, url: str) -> bool:
        """Check if a URL is a product page of this platform."""

    @abstractmethod
    def is_ok(self, metadata: ExtractedMetadata | None, html: str) -> bool:
        """Check if the extracted page is a real product page."""


class AmazonProductValidator(ProductPageValidator):
    """Validator for Amazon product detail pages."""

    name = "amazon"

    HOST_PATTERN = re.compile(r"(^|\.)amazon\.[a-z.]+$")
    PRODUCT_PATH_PATTERN = re.compile(r"/(dp|gp/product)/[a-z0-9]{10}", re.IGNORECASE)
    CDN_PATTERN = re.compile(
        r"m\.media-amazon\.com|images-na\.ssl-images-amazon\.com"
        r"|images-eu\.ssl-images-amazon\.com"
    )
    GENERIC_TITLES = frozenset({"amazon", "amazon.in", "amazon.com"})
    BLOCK_TITLE_TOKENS = ("robot", "captcha", "access denied", "forbidden")
    PRODUCT_MARKERS = (
        "producttitle",
        "data-asin",
        "add-to-cart",
        "acrcustomerreviewtext",
    )

    def applies_to(self, url: str) -> bool:
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        hostname = (parsed.hostname or "").lower()
        if not self.HOST_PATTERN.search(hostname):
            return False
        return bool(self.PRODUCT_PATH_PATTERN.search(parsed.path or ""))

    def is_ok(self, metadata: ExtractedMetadata | None, html: str) -> bool:
        if metadata is None:
            return False
        title = (metadata.title or "").strip().lower()
        if not title or title in self.GENERIC_TITLES:
            return False
        if any(token in title for token in self.BLOCK_TITLE_TOKENS):
            return False

        image = (metadata.images.primary_image or "").lower()
        if not self.CDN_PATTERN.search(image):
            return False

        lowered = (html or "").lower()
        return any(marker in lowered for marker in self.PRODUCT_MARKERS)


# Platforms without a validator here are judged by generic metadata usefulness
PRODUCT_VALIDATORS: tuple[ProductPageValidator, ...] = (AmazonProductValidator(),)


def find_product_validator(
    url: str,
    validators: tuple[ProductPageValidator, ...] = PRODUCT_VALIDATORS,
) -> ProductPageValidator | None:
    """Get the first validator that recognizes a URL as a product page.

    Args:
        url: Page URL.
        validators: Validators to consult.

    Returns:
        Matching validator, or None.
    """
    for validator in validators:
        if validator.applies_to(url):
            return validator
    return None
