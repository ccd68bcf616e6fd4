"""Unit tests for image candidate collection."""

import json

from bs4 import BeautifulSoup

from linklens.extract.candidates import (
    MAX_SCRIPT_MATCHES,
    MAX_STRUCTURED_DATA_DEPTH,
    CandidateCollector,
    ImageSourceKind,
    collect_candidates,
    visit_structured_data,
)


BASE_URL = "https://example.com/page"


def _collect(html: str) -> list:
    return collect_candidates(BeautifulSoup(html, "lxml"), BASE_URL)


class TestCandidateCollector:
    """Tests for CandidateCollector."""

    def test_first_occurrence_wins(self) -> None:
        """A URL keeps the source it was first seen with."""
        collector = CandidateCollector(BASE_URL)

        assert collector.add("/a.jpg", ImageSourceKind.META_TAG) is True
        assert collector.add("https://example.com/a.jpg", ImageSourceKind.IMG_ATTRIBUTE) is False

        assert len(collector) == 1
        assert collector.candidates[0].source == ImageSourceKind.META_TAG

    def test_non_strings_rejected(self) -> None:
        """Only string references are admitted."""
        collector = CandidateCollector(BASE_URL)

        assert collector.add(None, ImageSourceKind.META_TAG) is False
        assert collector.add(42, ImageSourceKind.META_TAG) is False

    def test_relative_urls_made_absolute(self) -> None:
        """Admitted candidates always carry absolute URLs."""
        collector = CandidateCollector(BASE_URL)
        collector.add("img/x.png", ImageSourceKind.IMG_ATTRIBUTE)

        assert collector.candidates[0].url == "https://example.com/img/x.png"


class TestVisitStructuredData:
    """Tests for the JSON-LD visitor."""

    def test_nested_graph(self) -> None:
        """Images inside @graph arrays and nested objects are found."""
        data = {
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "Product", "image": ["/p1.jpg", {"url": "/p2.jpg"}]},
                {"@type": "Organization", "logo": {"url": "/logo.png"}},
            ],
        }
        collector = CandidateCollector(BASE_URL)

        visit_structured_data(data, collector)

        urls = [c.url for c in collector.candidates]
        assert "https://example.com/p1.jpg" in urls
        assert "https://example.com/p2.jpg" in urls
        assert "https://example.com/logo.png" in urls
        assert all(c.source == ImageSourceKind.STRUCTURED_DATA for c in collector.candidates)

    def test_depth_guard(self) -> None:
        """Images nested beyond the depth limit are ignored."""
        node: dict = {"image": "/deep.jpg"}
        for _ in range(MAX_STRUCTURED_DATA_DEPTH + 5):
            node = {"child": node}
        collector = CandidateCollector(BASE_URL)

        visit_structured_data(node, collector)

        assert len(collector) == 0

    def test_scalars_ignored(self) -> None:
        """Scalar JSON values contribute nothing."""
        collector = CandidateCollector(BASE_URL)

        for value in (None, True, 3.5, "text"):
            visit_structured_data(value, collector)

        assert len(collector) == 0


class TestCollectCandidates:
    """Tests for collect_candidates over full documents."""

    def test_all_source_kinds(self) -> None:
        """Every source kind is recognized."""
        ld_json = json.dumps({"@type": "Article", "image": "/ld.jpg"})
        dynamic = json.dumps({"https://example.com/dyn.jpg": [800, 600]})
        html = f"""
        <html><head>
          <meta property="og:image" content="/og.jpg">
          <script type="application/ld+json">{ld_json}</script>
          <link rel="image_src" href="/link.jpg">
        </head><body>
          <picture><source srcset="/small.jpg 320w, /large.jpg 1280w"></picture>
          <img data-a-dynamic-image='{dynamic}'>
          <img src="/plain.jpg" data-src="/lazy.jpg">
          <video poster="/poster.jpg"></video>
          <div style="background-image: url('/bg.jpg')"></div>
          <script>var img = "https://example.com/script.png";</script>
        </body></html>
        """

        by_url = {c.url: c for c in _collect(html)}

        assert by_url["https://example.com/og.jpg"].source == ImageSourceKind.META_TAG
        assert by_url["https://example.com/ld.jpg"].source == ImageSourceKind.STRUCTURED_DATA
        assert by_url["https://example.com/large.jpg"].source == ImageSourceKind.RESPONSIVE_SRCSET
        assert by_url["https://example.com/large.jpg"].width == 1280
        assert by_url["https://example.com/dyn.jpg"].source == ImageSourceKind.RESPONSIVE_MAP
        assert by_url["https://example.com/dyn.jpg"].height == 600
        assert by_url["https://example.com/plain.jpg"].source == ImageSourceKind.IMG_ATTRIBUTE
        assert by_url["https://example.com/lazy.jpg"].source == ImageSourceKind.IMG_ATTRIBUTE
        assert by_url["https://example.com/poster.jpg"].source == ImageSourceKind.POSTER
        assert by_url["https://example.com/link.jpg"].source == ImageSourceKind.LINK_TAG
        assert by_url["https://example.com/bg.jpg"].source == ImageSourceKind.CSS_BACKGROUND
        assert by_url["https://example.com/script.png"].source == ImageSourceKind.INLINE_SCRIPT

    def test_invalid_json_ld_skipped(self) -> None:
        """Broken JSON-LD does not abort collection."""
        html = """
        <script type="application/ld+json">{not json</script>
        <img src="/ok.jpg">
        """

        urls = [c.url for c in _collect(html)]

        assert urls == ["https://example.com/ok.jpg"]

    def test_script_matches_bounded(self) -> None:
        """Only the first matches of each script are taken."""
        urls = " ".join(
            f'"https://example.com/s{i}.png"' for i in range(MAX_SCRIPT_MATCHES + 10)
        )
        html = f"<script>var all = [{urls}];</script>"

        candidates = _collect(html)

        assert len(candidates) == MAX_SCRIPT_MATCHES

    def test_unresolvable_dropped(self) -> None:
        """data: URIs never become candidates."""
        html = '<img src="data:image/gif;base64,R0lGOD"><img src="/real.png">'

        urls = [c.url for c in _collect(html)]

        assert urls == ["https://example.com/real.png"]
