"""Unit tests for URL shortener resolution."""

import httpx

from linklens.fetch.config import FetchConfig
from linklens.fetch.shortener import is_shortener_url, resolve_final_url


class TestIsShortenerUrl:
    """Tests for shortener host detection."""

    def test_known_shorteners(self) -> None:
        """Known shortener hosts are recognized."""
        assert is_shortener_url("https://bit.ly/abc") is True
        assert is_shortener_url("https://amzn.to/xyz") is True
        assert is_shortener_url("https://t.co/123") is True

    def test_regular_hosts(self) -> None:
        """Ordinary hosts are not shorteners."""
        assert is_shortener_url("https://example.com/abc") is False
        assert is_shortener_url("not a url") is False


class TestResolveFinalUrl:
    """Tests for resolve_final_url."""

    def test_follows_redirects_with_head(self) -> None:
        """HEAD redirects are followed to the destination."""
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            if request.url.host == "bit.ly":
                return httpx.Response(
                    301, headers={"location": "https://example.com/article"}
                )
            return httpx.Response(200)

        result = resolve_final_url(
            "https://bit.ly/abc", FetchConfig(), transport=httpx.MockTransport(handler)
        )

        assert result == "https://example.com/article"
        assert set(methods) == {"HEAD"}

    def test_falls_back_to_get(self) -> None:
        """Services that reject HEAD are resolved with GET."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "HEAD":
                return httpx.Response(405)
            if request.url.host == "bit.ly":
                return httpx.Response(
                    302, headers={"location": "https://example.com/landing"}
                )
            return httpx.Response(200, text="ok")

        result = resolve_final_url(
            "https://bit.ly/abc", FetchConfig(), transport=httpx.MockTransport(handler)
        )

        assert result == "https://example.com/landing"

    def test_failure_returns_input(self) -> None:
        """Transport errors leave the URL unchanged."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        result = resolve_final_url(
            "https://bit.ly/abc", FetchConfig(), transport=httpx.MockTransport(handler)
        )

        assert result == "https://bit.ly/abc"
