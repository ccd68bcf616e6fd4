"""Unit tests for image candidate scoring."""

from linklens.extract.candidates import ImageCandidate, ImageSourceKind
from linklens.extract.scoring import (
    SOURCE_BASE_SCORES,
    dimensions_from_url,
    pick_primary_image,
    rank_candidates,
    score_candidate,
    size_bonus,
)


def _candidate(
    url: str, source: ImageSourceKind, width: int = 0, height: int = 0
) -> ImageCandidate:
    return ImageCandidate(url=url, source=source, width=width, height=height)


class TestSourceOrdering:
    """Tests for the relative order of source kinds."""

    def test_base_scores_strictly_descending(self) -> None:
        """meta > structured > srcset > map > img > poster > link > css > script."""
        order = [
            ImageSourceKind.META_TAG,
            ImageSourceKind.STRUCTURED_DATA,
            ImageSourceKind.RESPONSIVE_SRCSET,
            ImageSourceKind.RESPONSIVE_MAP,
            ImageSourceKind.IMG_ATTRIBUTE,
            ImageSourceKind.POSTER,
            ImageSourceKind.LINK_TAG,
            ImageSourceKind.CSS_BACKGROUND,
            ImageSourceKind.INLINE_SCRIPT,
        ]
        scores = [SOURCE_BASE_SCORES[kind] for kind in order]

        assert scores == sorted(scores, reverse=True)
        assert len(set(scores)) == len(scores)

    def test_meta_beats_plain_img_of_same_size(self) -> None:
        """Equal images rank by source."""
        meta = _candidate("https://e.com/a.jpg", ImageSourceKind.META_TAG)
        img = _candidate("https://e.com/b.jpg", ImageSourceKind.IMG_ATTRIBUTE)

        assert rank_candidates([img, meta])[0] == meta


class TestDimensions:
    """Tests for URL-derived dimensions."""

    def test_query_parameters(self) -> None:
        """w/h query parameters are read."""
        assert dimensions_from_url("https://e.com/a.jpg?w=800&h=600") == (800, 600)
        assert dimensions_from_url("https://e.com/a.jpg?width=1200") == (1200, 0)

    def test_filename_pattern(self) -> None:
        """NNNxNNN in the filename is read."""
        assert dimensions_from_url("https://e.com/img/photo_1024x768.jpg") == (1024, 768)

    def test_width_suffix(self) -> None:
        """A NNNw token is taken as the width."""
        assert dimensions_from_url("https://e.com/img-640w.jpg") == (640, 0)

    def test_unknown(self) -> None:
        """No hints means zero dimensions."""
        assert dimensions_from_url("https://e.com/a.jpg") == (0, 0)


class TestScoreCandidate:
    """Tests for score_candidate."""

    def test_size_bonus_capped(self) -> None:
        """The size bonus never exceeds 160."""
        assert size_bonus(5000, 5000) == 160
        assert size_bonus(800, 400) == 120

    def test_explicit_dimensions_win_over_url(self) -> None:
        """URL hints are only used without explicit dimensions."""
        candidate = _candidate(
            "https://e.com/a.jpg?w=1600&h=1600", ImageSourceKind.IMG_ATTRIBUTE, 100, 100
        )

        assert score_candidate(candidate) == 60 + 20

    def test_penalties(self) -> None:
        """favicon, logo and svg URLs are penalized."""
        base = score_candidate(_candidate("https://e.com/hero.png", ImageSourceKind.META_TAG))

        favicon = score_candidate(
            _candidate("https://e.com/favicon.png", ImageSourceKind.META_TAG)
        )
        logo = score_candidate(_candidate("https://e.com/logo.png", ImageSourceKind.META_TAG))
        svg = score_candidate(_candidate("https://e.com/hero.svg", ImageSourceKind.META_TAG))

        assert base - favicon == 80
        assert base - logo == 40
        assert base - svg == 30

    def test_large_img_can_beat_small_meta_logo(self) -> None:
        """A big content image outranks a tiny meta logo."""
        meta_logo = _candidate("https://e.com/logo.svg", ImageSourceKind.META_TAG)
        hero = _candidate("https://e.com/hero.jpg", ImageSourceKind.IMG_ATTRIBUTE, 1200, 800)

        assert pick_primary_image([meta_logo, hero]) == "https://e.com/hero.jpg"


class TestPickPrimaryImage:
    """Tests for pick_primary_image."""

    def test_empty(self) -> None:
        """No candidates means no primary image."""
        assert pick_primary_image([]) is None

    def test_ties_keep_admission_order(self) -> None:
        """Equal scores favor the earlier candidate."""
        first = _candidate("https://e.com/1.jpg", ImageSourceKind.IMG_ATTRIBUTE)
        second = _candidate("https://e.com/2.jpg", ImageSourceKind.IMG_ATTRIBUTE)

        assert pick_primary_image([first, second]) == first.url
