"""HTTP access to platform oEmbed endpoints."""

import httpx
import structlog

from linklens.extract.metadata import ExtractedMetadata
from linklens.fetch.identity import random_user_agent
from linklens.fetch.metrics import FetchMetrics
from linklens.platform.merge import merge_metadata
from linklens.platform.resolvers import (
    DEFAULT_RESOLVERS,
    PlatformResolver,
    find_resolver,
)


logger = structlog.get_logger()


class PlatformMetadataClient:
    """Looks up authoritative metadata for recognized media platforms."""

    def __init__(
        self,
        timeout_seconds: float = 8.0,
        resolvers: tuple[PlatformResolver, ...] = DEFAULT_RESOLVERS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout_seconds: Timeout for each oEmbed request.
            resolvers: Supported platforms.
            transport: Optional httpx transport.
        """
        self._timeout = timeout_seconds
        self._resolvers = resolvers
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()

    def find_resolver(self, url: str) -> PlatformResolver | None:
        """Get the resolver for a URL, if its platform is supported."""
        return find_resolver(url, self._resolvers)

    def needs_fallback(self, url: str, metadata: ExtractedMetadata | None) -> bool:
        """Check if a URL's scraped metadata should be enriched."""
        resolver = self.find_resolver(url)
        return resolver is not None and resolver.needs_fallback(metadata)

    def fetch(self, url: str) -> ExtractedMetadata | None:
        """Fetch platform metadata for a URL.

        Args:
            url: Page URL on a supported platform.

        Returns:
            Platform metadata, or None if unsupported or the lookup failed.
        """
        resolver = self.find_resolver(url)
        if resolver is None:
            return None

        log = logger.bind(component="platform", platform=resolver.name)
        self._metrics.record_platform_fallback()

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(
                    resolver.oembed_url,
                    params=resolver.oembed_params(url),
                    headers={
                        "Accept": "application/json",
                        "User-Agent": random_user_agent(),
                    },
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("platform_lookup_failed", error=str(e))
            return None

        if not isinstance(payload, dict):
            log.warning("platform_payload_invalid", payload_type=type(payload).__name__)
            return None

        log.info("platform_lookup_complete", has_title=bool(payload.get("title")))
        return resolver.map_payload(payload)

    def enrich(self, url: str, metadata: ExtractedMetadata | None) -> ExtractedMetadata | None:
        """Enrich generic scraped metadata with platform metadata.

        Args:
            url: Page URL.
            metadata: Locally extracted metadata.

        Returns:
            Merged metadata, or the input unchanged when no lookup applies.
        """
        resolver = self.find_resolver(url)
        if resolver is None or not resolver.needs_fallback(metadata):
            return metadata

        platform_metadata = self.fetch(url)
        if platform_metadata is None:
            return metadata
        return merge_metadata(metadata, platform_metadata, resolver)
