"""Unit tests for HTML metadata extraction."""

from unittest.mock import patch

from linklens.extract.metadata import (
    ExtractedMetadata,
    MetadataImages,
    extract_metadata,
    has_useful_metadata,
    is_html_content_type,
    looks_like_html,
)


BASE_URL = "https://example.com/articles/42"


class TestExtractMetadata:
    """Tests for extract_metadata."""

    def test_og_image_and_title_only(self) -> None:
        """A lone og:image and <title> fill primary image and title."""
        html = """
        <html><head>
          <title>   Hello World  </title>
          <meta property="og:image" content="/hero.jpg">
        </head><body></body></html>
        """

        metadata = extract_metadata(html, BASE_URL)

        assert metadata.title == "Hello World"
        assert metadata.description is None
        assert metadata.images.primary_image == "https://example.com/hero.jpg"
        assert metadata.images.favicon is None
        assert metadata.images.apple_touch_icon is None
        # No logo selector matched, so the primary image stands in
        assert metadata.images.logo == metadata.images.primary_image

    def test_title_precedence(self) -> None:
        """og:title beats <title> beats <h1>."""
        html = """
        <head>
          <meta property="og:title" content="OG Title">
          <title>Doc Title</title>
        </head><body><h1>Heading</h1></body>
        """

        assert extract_metadata(html, BASE_URL).title == "OG Title"
        assert extract_metadata("<body><h1> Heading </h1></body>", BASE_URL).title == (
            "Heading"
        )

    def test_description_precedence(self) -> None:
        """og:description beats the description meta."""
        html = """
        <head>
          <meta name="description" content="Plain description">
          <meta property="og:description" content="  OG description ">
        </head>
        """

        assert extract_metadata(html, BASE_URL).description == "OG description"

    def test_icons(self) -> None:
        """Favicon and apple touch icon are resolved."""
        html = """
        <head>
          <link rel="shortcut icon" href="/favicon.ico">
          <link rel="apple-touch-icon-precomposed" href="/touch.png">
        </head>
        """

        images = extract_metadata(html, BASE_URL).images

        assert images.favicon == "https://example.com/favicon.ico"
        assert images.apple_touch_icon == "https://example.com/touch.png"
        assert images.logo == "https://example.com/favicon.ico"

    def test_logo_selector(self) -> None:
        """A logo selector match wins over the fallbacks."""
        html = """
        <head><meta property="og:image" content="https://cdn.example.com/hero.jpg"></head>
        <body><div class="site-logo"><img src="/brand.png"></div></body>
        """

        images = extract_metadata(html, BASE_URL).images

        assert images.logo == "https://example.com/brand.png"
        assert images.primary_image == "https://cdn.example.com/hero.jpg"

    def test_empty_document(self) -> None:
        """Empty input gives empty metadata."""
        metadata = extract_metadata("", BASE_URL)

        assert metadata == ExtractedMetadata()
        assert has_useful_metadata(metadata) is False

    def test_parser_failure_degrades(self) -> None:
        """Parser exceptions never escape."""
        with patch(
            "linklens.extract.metadata.BeautifulSoup", side_effect=RuntimeError("boom")
        ):
            metadata = extract_metadata("<html></html>", BASE_URL)

        assert metadata == ExtractedMetadata()


class TestHelpers:
    """Tests for metadata helpers."""

    def test_has_useful_metadata(self) -> None:
        """Any title, description or image counts."""
        assert has_useful_metadata(None) is False
        assert has_useful_metadata(ExtractedMetadata(title="x")) is True
        assert (
            has_useful_metadata(
                ExtractedMetadata(images=MetadataImages(favicon="https://e.com/f.ico"))
            )
            is True
        )

    def test_with_favicon_returns_copy(self) -> None:
        """Backfilling a favicon leaves the original untouched."""
        original = ExtractedMetadata(title="x")

        updated = original.with_favicon("https://e.com/favicon.ico")

        assert original.images.favicon is None
        assert updated.images.favicon == "https://e.com/favicon.ico"
        assert updated.title == "x"

    def test_images_serialize_with_wire_names(self) -> None:
        """Images use the names API clients expect."""
        images = MetadataImages(primary_image="https://e.com/a.jpg")

        dumped = images.model_dump(by_alias=True)

        assert dumped["ogImage"] == "https://e.com/a.jpg"
        assert "appleTouchIcon" in dumped

    def test_is_html_content_type(self) -> None:
        """Only text/html counts as declared HTML."""
        assert is_html_content_type("text/html; charset=utf-8") is True
        assert is_html_content_type("application/json") is False
        assert is_html_content_type(None) is False

    def test_looks_like_html_relaxed(self) -> None:
        """Mislabeled HTML is still recognized."""
        assert looks_like_html("<html><body/></html>", "text/plain") is True
        assert looks_like_html("< title>x</title>", "application/octet-stream") is True
        assert looks_like_html('{"a": 1}', "application/json") is False
        assert looks_like_html("", "text/html") is False
