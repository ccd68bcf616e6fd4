"""Merging of platform metadata into locally scraped metadata."""

from linklens.extract.metadata import ExtractedMetadata, MetadataImages
from linklens.platform.resolvers import PlatformResolver


def merge_metadata(
    base: ExtractedMetadata | None,
    override: ExtractedMetadata | None,
    resolver: PlatformResolver,
) -> ExtractedMetadata:
    """Merge platform metadata into scraped metadata.

    A scraped title or description is replaced only when it is missing or is
    the platform's boilerplate. Images are only filled where the scrape left
    a gap, so a specific local value is never regressed.

    Args:
        base: Locally extracted metadata.
        override: Metadata from the platform endpoint.
        resolver: Platform the URL belongs to.

    Returns:
        Merged metadata.
    """
    base = base or ExtractedMetadata()
    if override is None:
        return base

    title = base.title
    if not title or resolver.is_generic_title(title):
        title = override.title or title

    description = base.description
    if not description or resolver.is_generic_description(description):
        description = override.description or description

    local, remote = base.images, override.images
    images = MetadataImages(
        logo=local.logo or remote.logo,
        primary_image=local.primary_image or remote.primary_image,
        favicon=local.favicon or remote.favicon,
        apple_touch_icon=local.apple_touch_icon or remote.apple_touch_icon,
    )

    return ExtractedMetadata(title=title, description=description, images=images)
