"""Scoring of image candidates for the page's primary image.

The load-bearing contract is the relative order of source kinds; the exact
numbers are tuning parameters.
"""

import re

from linklens.extract.candidates import ImageCandidate, ImageSourceKind


SOURCE_BASE_SCORES: dict[ImageSourceKind, int] = {
    ImageSourceKind.META_TAG: 100,
    ImageSourceKind.STRUCTURED_DATA: 90,
    ImageSourceKind.RESPONSIVE_SRCSET: 70,
    ImageSourceKind.RESPONSIVE_MAP: 65,
    ImageSourceKind.IMG_ATTRIBUTE: 60,
    ImageSourceKind.POSTER: 50,
    ImageSourceKind.LINK_TAG: 45,
    ImageSourceKind.CSS_BACKGROUND: 40,
    ImageSourceKind.INLINE_SCRIPT: 30,
}

MAX_DIMENSION = 1600
DIMENSION_DIVISOR = 10

FAVICON_SPRITE_PENALTY = 80
LOGO_PENALTY = 40
SVG_PENALTY = 30

_WIDTH_PARAM = re.compile(r"[?&](?:w|width)=(\d+)")
_WIDTH_SUFFIX = re.compile(r"(\d{3,})w\b")
_HEIGHT_PARAM = re.compile(r"[?&](?:h|height)=(\d+)")
_FILENAME_SIZE = re.compile(r"[_\-/.](\d{2,4})x(\d{2,4})(?=[_\-./]|$)")


def dimensions_from_url(url: str) -> tuple[int, int]:
    """Guess width and height from query parameters or filename patterns.

    Args:
        url: Lower-cased candidate URL.

    Returns:
        (width, height), 0 where unknown.
    """
    width = height = 0

    sized = _FILENAME_SIZE.search(url)
    if sized:
        width, height = int(sized.group(1)), int(sized.group(2))

    width_match = _WIDTH_PARAM.search(url) or _WIDTH_SUFFIX.search(url)
    if width_match:
        width = int(width_match.group(1))

    height_match = _HEIGHT_PARAM.search(url)
    if height_match:
        height = int(height_match.group(1))

    return width, height


def size_bonus(width: int, height: int) -> float:
    """Bonus for large images, at most 160 points."""
    return (
        min(width, MAX_DIMENSION) / DIMENSION_DIVISOR
        + min(height, MAX_DIMENSION) / DIMENSION_DIVISOR
    )


def score_candidate(candidate: ImageCandidate) -> float:
    """Score a candidate; higher is a better hero image.

    Args:
        candidate: Image candidate.

    Returns:
        Score.
    """
    url = candidate.url.lower()
    score: float = SOURCE_BASE_SCORES[candidate.source]

    width, height = candidate.width, candidate.height
    if not width and not height:
        width, height = dimensions_from_url(url)
    score += size_bonus(width, height)

    if "favicon" in url or "sprite" in url:
        score -= FAVICON_SPRITE_PENALTY
    if "logo" in url:
        score -= LOGO_PENALTY
    if url.endswith(".svg"):
        score -= SVG_PENALTY

    return score


def rank_candidates(candidates: list[ImageCandidate]) -> list[ImageCandidate]:
    """Order candidates best first; ties keep admission order."""
    return sorted(candidates, key=score_candidate, reverse=True)


def pick_primary_image(candidates: list[ImageCandidate]) -> str | None:
    """Get the URL of the best-scoring candidate, if any."""
    if not candidates:
        return None
    return rank_candidates(candidates)[0].url
