"""Unit tests for the platform metadata client."""

import httpx

from linklens.extract.metadata import ExtractedMetadata, MetadataImages
from linklens.fetch.metrics import FetchMetrics
from linklens.platform.client import PlatformMetadataClient


VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
OEMBED_PAYLOAD = {
    "title": "Never Gonna Give You Up",
    "author_name": "Rick Astley",
    "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
}


def _client(handler) -> PlatformMetadataClient:
    return PlatformMetadataClient(transport=httpx.MockTransport(handler))


class TestPlatformMetadataClient:
    """Tests for PlatformMetadataClient."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        FetchMetrics.reset()

    def test_fetch_maps_payload(self) -> None:
        """A successful lookup returns mapped metadata."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=OEMBED_PAYLOAD)

        metadata = _client(handler).fetch(VIDEO_URL)

        assert metadata is not None
        assert metadata.title == "Never Gonna Give You Up"
        assert metadata.description == "By Rick Astley"
        assert seen[0].url.host == "www.youtube.com"
        assert seen[0].url.params["url"] == VIDEO_URL
        assert seen[0].url.params["format"] == "json"
        assert FetchMetrics.get_instance().platform_fallbacks_total == 1

    def test_fetch_unsupported_makes_no_request(self) -> None:
        """Unsupported URLs are skipped without I/O."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("unexpected request")

        assert _client(handler).fetch("https://example.com/") is None

    def test_fetch_http_error_returns_none(self) -> None:
        """Error statuses degrade to None."""
        metadata = _client(lambda request: httpx.Response(404)).fetch(VIDEO_URL)

        assert metadata is None

    def test_fetch_invalid_json_returns_none(self) -> None:
        """Undecodable bodies degrade to None."""
        metadata = _client(lambda request: httpx.Response(200, text="<html>")).fetch(
            VIDEO_URL
        )

        assert metadata is None

    def test_fetch_non_object_payload_returns_none(self) -> None:
        """JSON that is not an object is rejected."""
        metadata = _client(lambda request: httpx.Response(200, json=[1, 2])).fetch(
            VIDEO_URL
        )

        assert metadata is None

    def test_fetch_transport_error_returns_none(self) -> None:
        """Network errors degrade to None."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert _client(handler).fetch(VIDEO_URL) is None

    def test_enrich_generic_metadata(self) -> None:
        """Generic scraped metadata is merged with the platform's."""
        client = _client(lambda request: httpx.Response(200, json=OEMBED_PAYLOAD))

        enriched = client.enrich(VIDEO_URL, ExtractedMetadata(title="YouTube"))

        assert enriched is not None
        assert enriched.title == "Never Gonna Give You Up"
        assert enriched.images.primary_image is not None

    def test_enrich_specific_metadata_untouched(self) -> None:
        """Specific metadata skips the lookup."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("unexpected request")

        specific = ExtractedMetadata(
            title="Some video",
            description="Official",
            images=MetadataImages(primary_image="https://i.ytimg.com/x.jpg"),
        )

        assert _client(handler).enrich(VIDEO_URL, specific) == specific

    def test_enrich_failed_lookup_keeps_input(self) -> None:
        """A failed lookup leaves the scraped metadata."""
        client = _client(lambda request: httpx.Response(500))
        scraped = ExtractedMetadata(title="YouTube")

        assert client.enrich(VIDEO_URL, scraped) == scraped

    def test_needs_fallback(self) -> None:
        """Only supported platforms with weak metadata need a lookup."""
        client = PlatformMetadataClient()

        assert client.needs_fallback(VIDEO_URL, None) is True
        assert client.needs_fallback("https://example.com/", None) is False
