"""Platform definitions for oEmbed metadata lookups.

Some media platforms serve crawlers a shell page whose title is just the
platform name. Their public oEmbed endpoints return the real title, author
and thumbnail, which this module maps into ExtractedMetadata.
"""

from abc import ABC, abstractmethod
from typing import Any

from linklens.extract.metadata import ExtractedMetadata, MetadataImages
from linklens.platform.constants import (
    FIELD_AUTHOR_NAME,
    FIELD_THUMBNAIL_URL,
    FIELD_TITLE,
    PLATFORM_SPOTIFY,
    PLATFORM_YOUTUBE,
    SPOTIFY_FAVICON_URL,
    SPOTIFY_GENERIC_TITLE_TOKENS,
    SPOTIFY_OEMBED_URL,
    YOUTUBE_FAVICON_URL,
    YOUTUBE_GENERIC_DESCRIPTION,
    YOUTUBE_GENERIC_TITLES,
    YOUTUBE_OEMBED_URL,
)


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class PlatformResolver(ABC):
    """One media platform with an oEmbed endpoint."""

    name: str
    oembed_url: str
    favicon_url: str

    @abstractmethod
    def matches(self, url: str) -> bool:
        """Check if a URL belongs to this platform."""

    @abstractmethod
    def is_generic_title(self, title: str | None) -> bool:
        """Check if a scraped title is platform boilerplate."""

    def is_generic_description(self, description: str | None) -> bool:  # noqa: ARG002
        """Check if a scraped description is platform boilerplate."""
        return False

    def oembed_params(self, url: str) -> dict[str, str]:
        """Query parameters for the oEmbed request."""
        return {"url": url}

    def describe(self, author: str) -> str:
        """Turn the oEmbed author into a description."""
        return author

    def needs_fallback(self, metadata: ExtractedMetadata | None) -> bool:
        """Check if scraped metadata is too generic to trust.

        Args:
            metadata: Locally extracted metadata.

        Returns:
            True if an oEmbed lookup should be made.
        """
        if metadata is None:
            return True
        return (
            self.is_generic_title(metadata.title)
            or self.is_generic_description(metadata.description)
            or not metadata.images.primary_image
        )

    def map_payload(self, payload: dict[str, Any]) -> ExtractedMetadata:
        """Map an oEmbed response into ExtractedMetadata.

        Args:
            payload: Decoded oEmbed JSON.

        Returns:
            ExtractedMetadata with the platform favicon.
        """
        author = _str_or_none(payload.get(FIELD_AUTHOR_NAME))
        return ExtractedMetadata(
            title=_str_or_none(payload.get(FIELD_TITLE)),
            description=self.describe(author) if author else None,
            images=MetadataImages(
                primary_image=_str_or_none(payload.get(FIELD_THUMBNAIL_URL)),
                favicon=self.favicon_url,
            ),
        )


class YouTubeResolver(PlatformResolver):
    """YouTube videos, shorts and youtu.be links."""

    name = PLATFORM_YOUTUBE
    oembed_url = YOUTUBE_OEMBED_URL
    favicon_url = YOUTUBE_FAVICON_URL

    def matches(self, url: str) -> bool:
        lowered = url.lower()
        return "youtube.com" in lowered or "youtu.be" in lowered

    def is_generic_title(self, title: str | None) -> bool:
        return (title or "").strip().lower() in YOUTUBE_GENERIC_TITLES

    def is_generic_description(self, description: str | None) -> bool:
        return YOUTUBE_GENERIC_DESCRIPTION in (description or "").lower()

    def oembed_params(self, url: str) -> dict[str, str]:
        return {"url": url, "format": "json"}

    def describe(self, author: str) -> str:
        return f"By {author}"


class SpotifyResolver(PlatformResolver):
    """Spotify tracks, albums, playlists and episodes."""

    name = PLATFORM_SPOTIFY
    oembed_url = SPOTIFY_OEMBED_URL
    favicon_url = SPOTIFY_FAVICON_URL

    def matches(self, url: str) -> bool:
        return "spotify.com" in url.lower()

    def is_generic_title(self, title: str | None) -> bool:
        lowered = (title or "").lower()
        return all(token in lowered for token in SPOTIFY_GENERIC_TITLE_TOKENS)


DEFAULT_RESOLVERS: tuple[PlatformResolver, ...] = (YouTubeResolver(), SpotifyResolver())


def find_resolver(
    url: str,
    resolvers: tuple[PlatformResolver, ...] = DEFAULT_RESOLVERS,
) -> PlatformResolver | None:
    """Get the resolver for a URL's platform, if it has one."""
    for resolver in resolvers:
        if resolver.matches(url):
            return resolver
    return None
