"""
End-to-end tests: realistic pages through the public entry points.
"""

import asyncio

import pytest
from linkpreview import MetadataField, MetadataResolver, ParseError, Vocabulary, resolve_metadata
from linkpreview.config import Config

BLOG_POST_HTML = """<!doctype html>
<html lang=en>
<head>
<meta charset=utf-8>
<base href="https://static.example.org/blog/">
<title>How we rebuilt our search &mdash; Example Engineering</title>
<meta name=description content="A long walk through the search rewrite">
<meta property="og:type" content="article">
<meta property="og:title" content="">
<meta property="og:image" content="covers/search.webp">
<meta name="twitter:title" content="How we rebuilt our search">
<meta name="twitter:image" content="https://cdn.example.org/twitter/search.png">
<link rel="canonical" href="/posts/search-rewrite">
<script type="application/ld+json">
[{"@context": "https://schema.org", "@type": "BlogPosting",
  "headline": "How we rebuilt search (structured)",
  "author": [{"@type": "Person", "name": "Grace Hopper"}],
  "publisher": {"@type": "Organization", "name": "Example Engineering"}}]
</script>
</head>
<body>
<h1>How we rebuilt our search
<p>Unclosed paragraph with an <img src=inline.png> image
</body>
</html>
"""


@pytest.mark.integration
class TestBlogPost:
    """A page mixing every vocabulary, broken values and a <base> element."""

    def test_resolution(self):
        resolver = MetadataResolver(metrics_enabled=False)
        metadata = resolver.resolve(BLOG_POST_HTML, "https://www.example.org/blog/search-rewrite")

        # Empty og:title falls through to Twitter.
        assert metadata.title == "How we rebuilt our search"
        assert metadata.source(MetadataField.TITLE) is Vocabulary.TWITTER

        # Relative og:image resolves against <base href>, not the page address.
        assert metadata.image == "https://static.example.org/blog/covers/search.webp"
        assert metadata.source(MetadataField.IMAGE) is Vocabulary.OPENGRAPH

        assert metadata.description == "A long walk through the search rewrite"
        assert metadata.source(MetadataField.DESCRIPTION) is Vocabulary.FALLBACK

        assert metadata.author == "Grace Hopper"
        assert metadata.site_name == "Example Engineering"
        assert metadata.schema_type == "BlogPosting"

        assert metadata.url == "https://static.example.org/posts/search-rewrite"
        assert metadata.domain == "static.example.org"
        assert metadata.locale == "en"

    def test_without_base_url(self):
        """The <base> element alone is enough to resolve relative references."""
        metadata = resolve_metadata(BLOG_POST_HTML)
        assert metadata.image == "https://static.example.org/blog/covers/search.webp"

    def test_parallel_configuration(self):
        config = Config.model_validate({"resolver": {"parallel_extraction": True}})
        parallel = MetadataResolver(config.resolver, metrics_enabled=False)
        sequential = MetadataResolver(metrics_enabled=False)

        assert parallel.resolve(BLOG_POST_HTML) == sequential.resolve(BLOG_POST_HTML)


@pytest.mark.integration
class TestManyDocuments:
    @pytest.mark.asyncio
    async def test_gathered_resolutions(self, full_featured_html):
        resolver = MetadataResolver(metrics_enabled=False)
        pages = [full_featured_html, BLOG_POST_HTML, "<html></html>"] * 4

        results = await asyncio.gather(*(resolver.resolve_async(page) for page in pages))

        assert [r.is_empty for r in results[:3]] == [False, False, True]
        assert results[:3] * 4 == results
        assert resolver.stats["resolutions"] == len(pages)

    @pytest.mark.asyncio
    async def test_parse_error_does_not_affect_other_documents(self, full_featured_html):
        resolver = MetadataResolver(metrics_enabled=False)

        results = await asyncio.gather(
            resolver.resolve_async(full_featured_html),
            resolver.resolve_async("\x00" * 16),
            return_exceptions=True,
        )

        assert results[0].title == "SEO Strategies for a better web"
        assert isinstance(results[1], ParseError)
        assert resolver.stats["parse_errors"] == 1
