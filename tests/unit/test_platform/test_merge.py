"""Unit tests for platform metadata merging."""

from linklens.extract.metadata import ExtractedMetadata, MetadataImages
from linklens.platform.merge import merge_metadata
from linklens.platform.resolvers import YouTubeResolver


PLATFORM = ExtractedMetadata(
    title="Never Gonna Give You Up",
    description="By Rick Astley",
    images=MetadataImages(
        primary_image="https://i.ytimg.com/hq.jpg",
        favicon="https://www.youtube.com/favicon.png",
    ),
)


class TestMergeMetadata:
    """Tests for merge_metadata."""

    def setup_method(self) -> None:
        """Create the resolver."""
        self.resolver = YouTubeResolver()

    def test_generic_title_replaced(self) -> None:
        """Boilerplate titles give way to the platform title."""
        base = ExtractedMetadata(title="YouTube")

        merged = merge_metadata(base, PLATFORM, self.resolver)

        assert merged.title == "Never Gonna Give You Up"
        assert merged.description == "By Rick Astley"

    def test_specific_values_kept(self) -> None:
        """A specific local title and image are never regressed."""
        base = ExtractedMetadata(
            title="Local Title",
            description="Local description",
            images=MetadataImages(primary_image="https://cdn.example.com/local.jpg"),
        )

        merged = merge_metadata(base, PLATFORM, self.resolver)

        assert merged.title == "Local Title"
        assert merged.description == "Local description"
        assert merged.images.primary_image == "https://cdn.example.com/local.jpg"
        # Gaps are still filled
        assert merged.images.favicon == "https://www.youtube.com/favicon.png"

    def test_missing_base(self) -> None:
        """No local metadata means the platform values are used."""
        merged = merge_metadata(None, PLATFORM, self.resolver)

        assert merged == PLATFORM

    def test_missing_override(self) -> None:
        """No platform metadata leaves the local values."""
        base = ExtractedMetadata(title="YouTube")

        assert merge_metadata(base, None, self.resolver) == base
