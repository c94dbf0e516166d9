"""
Unit tests for the per-vocabulary field extractors.
"""

import pytest
from linkpreview.document import load
from linkpreview.metadata.extractors import (
    EXTRACTORS,
    extract_fallback,
    extract_opengraph,
    extract_schema_org,
    extract_twitter,
    parse_json_ld,
)
from linkpreview.metadata.selectors import SELECTORS, Selector
from linkpreview.protocols import MetadataField, Vocabulary

from tests.helpers.html_samples import (
    FALLBACK_ONLY_HTML,
    FULL_FEATURED_HTML,
    JSON_LD_HTML,
    SCHEMA_ONLY_HTML,
    TWITTER_ONLY_HTML,
)


def _values(candidates):
    return {metadata_field: candidate.value for metadata_field, candidate in candidates.items()}


class TestOpenGraphExtractor:
    """Tests for extract_opengraph."""

    def test_full_document(self):
        candidates = extract_opengraph(load(FULL_FEATURED_HTML))
        values = _values(candidates)

        assert values[MetadataField.TITLE] == "SEO Strategies for a better web"
        assert values[MetadataField.SITE_NAME] == "Apple Developer Blog"
        assert values[MetadataField.LOCALE] == "en_US"
        assert MetadataField.AUTHOR not in values
        assert MetadataField.TYPE not in values
        assert all(c.vocabulary is Vocabulary.OPENGRAPH for c in candidates.values())

    def test_missing_tags_leave_fields_absent(self):
        assert extract_opengraph(load(TWITTER_ONLY_HTML)) == {}

    def test_first_tag_in_document_order_wins(self):
        html = '<meta property="og:title" content="First"><meta property="og:title" content="Second">'
        assert _values(extract_opengraph(load(html)))[MetadataField.TITLE] == "First"

    def test_blank_content_is_still_a_candidate(self):
        """Test that a matched tag with blank content is reported for normalization to reject."""
        html = '<meta property="og:title" content="   ">'
        candidate = extract_opengraph(load(html))[MetadataField.TITLE]

        assert candidate.value == "   "
        assert candidate.selector == "meta[property=og:title]@content"

    def test_tag_without_content_attribute_is_skipped(self):
        html = '<meta property="og:image"><meta property="og:image" content="https://a.example/i.png">'
        assert _values(extract_opengraph(load(html)))[MetadataField.IMAGE] == "https://a.example/i.png"

    def test_name_attribute_is_accepted(self):
        html = '<meta name="og:description" content="Named">'
        assert _values(extract_opengraph(load(html)))[MetadataField.DESCRIPTION] == "Named"

    def test_og_image_row_beats_secure_url_regardless_of_order(self):
        html = (
            '<meta property="og:image:secure_url" content="https://a.example/secure.png">'
            '<meta property="og:image" content="https://a.example/plain.png">'
        )
        assert _values(extract_opengraph(load(html)))[MetadataField.IMAGE] == "https://a.example/plain.png"

    def test_added_row_extends_extraction(self):
        """Test that a new selector row is picked up without extractor changes."""
        extra = Selector(Vocabulary.OPENGRAPH, MetadataField.AUTHOR, "meta", (("property", "book:author"),))
        html = '<meta property="book:author" content="Mary Shelley">'

        assert MetadataField.AUTHOR not in extract_opengraph(load(html))
        assert _values(extract_opengraph(load(html), SELECTORS + (extra,)))[MetadataField.AUTHOR] == "Mary Shelley"


class TestTwitterExtractor:
    def test_twitter_only(self):
        values = _values(extract_twitter(load(TWITTER_ONLY_HTML)))
        assert values == {
            MetadataField.TITLE: "Twitter Title",
            MetadataField.DESCRIPTION: "Twitter Description",
            MetadataField.IMAGE: "https://cdn.example.com/card.png",
        }

    def test_creator_maps_to_author(self):
        values = _values(extract_twitter(load(FULL_FEATURED_HTML)))
        assert values[MetadataField.AUTHOR] == "@johnappleseed"

    def test_property_attribute_is_accepted(self):
        html = '<meta property="twitter:title" content="Via property">'
        assert _values(extract_twitter(load(html)))[MetadataField.TITLE] == "Via property"

    def test_ignores_opengraph_tags(self):
        html = '<meta property="og:title" content="OG">'
        assert extract_twitter(load(html)) == {}


class TestSchemaOrgExtractor:
    """Tests for microdata and JSON-LD reading."""

    def test_microdata(self):
        values = _values(extract_schema_org(load(SCHEMA_ONLY_HTML)))

        assert values[MetadataField.TITLE] == "Schema Name"
        assert values[MetadataField.DESCRIPTION] == "Schema Description"
        assert values[MetadataField.IMAGE] == "https://cdn.example.com/schema.png"
        assert values[MetadataField.TYPE] == "https://schema.org/Product"

    def test_microdata_image_from_img_src(self):
        html = '<div itemscope itemtype="https://schema.org/Recipe"><img itemprop="image" src="https://a.example/r.jpg"></div>'
        values = _values(extract_schema_org(load(html)))
        assert values[MetadataField.IMAGE] == "https://a.example/r.jpg"

    def test_headline_before_name(self):
        html = '<meta itemprop="name" content="Name"><meta itemprop="headline" content="Headline">'
        assert _values(extract_schema_org(load(html)))[MetadataField.TITLE] == "Headline"

    def test_json_ld_fills_missing_fields(self):
        """Test that microdata wins and JSON-LD only supplies what microdata lacks."""
        values = _values(extract_schema_org(load(FULL_FEATURED_HTML)))

        assert values[MetadataField.TITLE] == "SEO Strategies (Schema)"
        assert values[MetadataField.DESCRIPTION] == "Schema description"
        assert values[MetadataField.AUTHOR] == "John Appleseed"
        assert values[MetadataField.SITE_NAME] == "Apple"
        assert values[MetadataField.TYPE] == "Article"

    def test_malformed_json_ld_block_is_skipped(self):
        candidates = extract_schema_org(load(JSON_LD_HTML))
        values = _values(candidates)

        assert values[MetadataField.TITLE] == "From JSON-LD"
        assert values[MetadataField.IMAGE] == "https://cdn.example.com/ld.png"
        assert values[MetadataField.AUTHOR] == "Ada Lovelace"
        assert values[MetadataField.TYPE] == "NewsArticle"
        assert candidates[MetadataField.TITLE].selector == "ld+json:headline"

    def test_json_ld_fills_blank_microdata(self):
        html = (
            '<meta itemprop="description" content="  ">'
            '<script type="application/ld+json">{"description": "From JSON-LD"}</script>'
        )
        assert _values(extract_schema_org(load(html)))[MetadataField.DESCRIPTION] == "From JSON-LD"

    def test_non_blank_microdata_owns_its_field(self):
        html = (
            '<link itemprop="image" href="/relative.png">'
            '<script type="application/ld+json">{"image": "https://a.example/ld.png"}</script>'
        )
        assert _values(extract_schema_org(load(html)))[MetadataField.IMAGE] == "/relative.png"

    def test_blank_microdata_kept_without_json_ld_value(self):
        html = '<meta itemprop="description" content="">'
        assert _values(extract_schema_org(load(html)))[MetadataField.DESCRIPTION] == ""

    def test_json_ld_entities_decoded(self):
        html = '<script type="application/ld+json">{"author": {"name": "Ben &amp; Jerry"}}</script>'
        assert _values(extract_schema_org(load(html)))[MetadataField.AUTHOR] == "Ben & Jerry"

    def test_image_object_url(self):
        html = (
            '<script type="application/ld+json">'
            '{"image": {"@type": "ImageObject", "url": "https://a.example/obj.png"}}'
            "</script>"
        )
        assert _values(extract_schema_org(load(html)))[MetadataField.IMAGE] == "https://a.example/obj.png"


class TestParseJsonLd:
    def test_top_level_array(self):
        objects = parse_json_ld(['[{"name": "a"}, 3, {"name": "b"}]'])
        assert objects == [{"name": "a"}, {"name": "b"}]

    def test_invalid_blocks_are_skipped(self):
        objects = parse_json_ld(["{not json", '"just a string"', '{"name": "ok"}'])
        assert objects == [{"name": "ok"}]

    def test_empty(self):
        assert parse_json_ld([]) == []


class TestFallbackExtractor:
    """Tests for generic HTML signals."""

    def test_fallback_only(self):
        values = _values(extract_fallback(load(FALLBACK_ONLY_HTML)))

        assert values[MetadataField.TITLE].strip().startswith("Plain")
        assert values[MetadataField.DESCRIPTION] == "Plain description"
        assert values[MetadataField.IMAGE] == "https://cdn.example.com/first.png"

    def test_full_document_signals(self):
        values = _values(extract_fallback(load(FULL_FEATURED_HTML)))

        assert values[MetadataField.TITLE] == "SEO Strategies for a better web | Apple Developer"
        assert values[MetadataField.IMAGE] == "/images/fallback-preview.png"
        assert values[MetadataField.SITE_NAME] == "Apple Developer"
        assert values[MetadataField.AUTHOR] == "Jane Roe"
        assert values[MetadataField.URL] == "https://en.wikipedia.com/wiki/Search_engine_optimization"
        assert values[MetadataField.LOCALE] == "en-US"

    def test_heading_and_paragraph_when_head_is_bare(self):
        html = "<html><body><h2>Sub</h2><h1>Main</h1><p>First para</p><p>Second</p></body></html>"
        values = _values(extract_fallback(load(html)))

        assert values[MetadataField.TITLE] == "Main"
        assert values[MetadataField.DESCRIPTION] == "First para"

    def test_images_without_src_are_ignored(self):
        html = '<body><img alt="x"><img src="/real.png"></body>'
        assert _values(extract_fallback(load(html)))[MetadataField.IMAGE] == "/real.png"


@pytest.mark.parametrize("vocabulary", list(Vocabulary))
def test_extractors_are_registered(vocabulary):
    """Every vocabulary has exactly one extractor and an empty document yields nothing."""
    assert vocabulary in EXTRACTORS
    assert EXTRACTORS[vocabulary](load("")) == {}
