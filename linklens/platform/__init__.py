"""Platform metadata resolvers (oEmbed) for YouTube and Spotify."""

from linklens.platform.client import PlatformMetadataClient
from linklens.platform.merge import merge_metadata
from linklens.platform.resolvers import (
    DEFAULT_RESOLVERS,
    PlatformResolver,
    SpotifyResolver,
    YouTubeResolver,
    find_resolver,
)


__all__ = [
    "DEFAULT_RESOLVERS",
    "PlatformMetadataClient",
    "PlatformResolver",
    "SpotifyResolver",
    "YouTubeResolver",
    "find_resolver",
    "merge_metadata",
]
