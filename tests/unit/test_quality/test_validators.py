"""Unit tests for product page validators."""

from linklens.extract.metadata import ExtractedMetadata, MetadataImages
from linklens.quality.validators import (
    PRODUCT_VALIDATORS,
    AmazonProductValidator,
    ProductPageValidator,
    find_product_validator,
)


PRODUCT_URL = "https://www.amazon.in/Widget-3000/dp/B0ABCDEF12?ref=xyz"
PRODUCT_HTML = '<html><span id="productTitle">Widget 3000</span></html>'


def _metadata(title: str | None, image: str | None) -> ExtractedMetadata:
    return ExtractedMetadata(title=title, images=MetadataImages(primary_image=image))


class TestAmazonProductValidator:
    """Tests for AmazonProductValidator."""

    def setup_method(self) -> None:
        """Create the validator."""
        self.validator = AmazonProductValidator()

    def test_applies_to_product_urls(self) -> None:
        """dp and gp/product paths on Amazon hosts are product pages."""
        assert self.validator.applies_to(PRODUCT_URL) is True
        assert self.validator.applies_to("https://amazon.com/gp/product/B0ABCDEF12") is True

    def test_ignores_other_pages(self) -> None:
        """Search pages and other hosts are not product pages."""
        assert self.validator.applies_to("https://www.amazon.in/s?k=widget") is False
        assert self.validator.applies_to("https://example.com/dp/B0ABCDEF12") is False
        assert self.validator.applies_to("https://notamazon.com/dp/B0ABCDEF12") is False

    def test_real_product_page_ok(self) -> None:
        """Specific title, CDN image and a marker pass."""
        metadata = _metadata("Widget 3000", "https://m.media-amazon.com/images/I/x.jpg")

        assert self.validator.is_ok(metadata, PRODUCT_HTML) is True

    def test_missing_markers_and_foreign_image_fail(self) -> None:
        """A shell without markers and CDN image fails."""
        metadata = _metadata("Widget 3000", "https://example.com/x.jpg")

        assert self.validator.is_ok(metadata, "<html>Loading</html>") is False

    def test_foreign_image_fails(self) -> None:
        """Markers alone are not enough."""
        metadata = _metadata("Widget 3000", "https://example.com/x.jpg")

        assert self.validator.is_ok(metadata, PRODUCT_HTML) is False

    def test_generic_or_robot_title_fails(self) -> None:
        """Boilerplate and robot-check titles fail."""
        image = "https://m.media-amazon.com/images/I/x.jpg"

        assert self.validator.is_ok(_metadata("Amazon.in", image), PRODUCT_HTML) is False
        assert (
            self.validator.is_ok(_metadata("Robot Check", image), PRODUCT_HTML) is False
        )
        assert self.validator.is_ok(_metadata(None, image), PRODUCT_HTML) is False

    def test_missing_metadata_fails(self) -> None:
        """No metadata at all fails."""
        assert self.validator.is_ok(None, PRODUCT_HTML) is False


class TestFindProductValidator:
    """Tests for find_product_validator."""

    def test_finds_amazon(self) -> None:
        """Amazon product URLs get the Amazon validator."""
        validator = find_product_validator(PRODUCT_URL)

        assert isinstance(validator, AmazonProductValidator)

    def test_none_for_other_urls(self) -> None:
        """Non-product URLs get no validator."""
        assert find_product_validator("https://example.com/blog") is None

    def test_custom_validators(self) -> None:
        """Additional platforms plug in through the validators tuple."""

        class ShopValidator(ProductPageValidator):
            name = "shop"

            def applies_to(self, url: str) -> bool:
                return "shop.example.com/item/" in url

            def is_ok(self, metadata: ExtractedMetadata | None, html: str) -> bool:
                return "price" in html

        validators = (*PRODUCT_VALIDATORS, ShopValidator())
        validator = find_product_validator(
            "https://shop.example.com/item/1", validators
        )

        assert isinstance(validator, ShopValidator)
