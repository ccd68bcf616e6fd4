"""HTML metadata and image extraction.

Parses a document into title, description and ranked image candidates:
- Candidates gathered from meta tags, JSON-LD, srcset, image maps, <img>,
  posters, link tags, inline styles and scripts
- Source-kind and size based scoring for the primary image
- Logo and favicon lookup with a fixed fallback order
"""

from linklens.extract.candidates import (
    CandidateCollector,
    ImageCandidate,
    ImageSourceKind,
    collect_candidates,
)
from linklens.extract.metadata import (
    ExtractedMetadata,
    MetadataImages,
    extract_metadata,
    has_useful_metadata,
    is_html_content_type,
    looks_like_html,
)
from linklens.extract.scoring import pick_primary_image, score_candidate
from linklens.extract.urls import hostname_of, resolve_url, site_root


__all__ = [
    "CandidateCollector",
    "ExtractedMetadata",
    "ImageCandidate",
    "ImageSourceKind",
    "MetadataImages",
    "collect_candidates",
    "extract_metadata",
    "has_useful_metadata",
    "hostname_of",
    "is_html_content_type",
    "looks_like_html",
    "pick_primary_image",
    "resolve_url",
    "score_candidate",
    "site_root",
]
