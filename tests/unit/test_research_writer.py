"""
Unit tests for the research and drafting stages.
"""

import pytest
from dataclasses import replace
from datetime import date, datetime, timezone

from conftest import FakeGenerator
from autoblog.core.models import ResearchBundle, SourceType, TopicCandidate, TopicSelection
from autoblog.core.quality import h2_headings
from autoblog.core.research import Researcher, infer_reliable_sources
from autoblog.core.scorer import CandidateScorer
from autoblog.core.verifier import normalize_claims
from autoblog.core.writer import ArticleWriter
from autoblog.fetchers.sources import FALLBACK_SOURCES

TODAY = date(2026, 10, 18)


def make_selection(title, source_type=SourceType.POOL, url=None):
    scored = CandidateScorer().score(TopicCandidate(title, source_type=source_type, source_url=url), [])
    return TopicSelection(selected=scored, fallback=scored, angle="Explain it.", candidates=[scored])


class TestInferReliableSources:
    """Tests for keyword-based source inference."""

    def test_matched_rule(self):
        sources = infer_reliable_sources("Practical TypeScript patterns for safer API boundaries")
        assert [s.title for s in sources] == ["TypeScript Handbook", "TypeScript 5.x Release Notes"]

    def test_padded_with_fallback(self):
        sources = infer_reliable_sources("Feature flags in modern web applications")
        assert [s.url for s in sources] == [url for _, url in FALLBACK_SOURCES]

    def test_several_rules(self):
        sources = infer_reliable_sources("Shipping React apps with Docker")
        assert len(sources) == 4

    def test_short_keywords_match_whole_words(self):
        sources = infer_reliable_sources("Writing better tests")
        assert [s.url for s in sources] == [url for _, url in FALLBACK_SOURCES]


class TestResearcher:
    """Tests for Researcher.research."""

    @pytest.mark.asyncio
    async def test_deterministic_claims(self, test_config):
        researcher = Researcher(config=test_config)
        bundle = await researcher.research(
            make_selection("Practical TypeScript patterns for safer API boundaries"), today=TODAY)

        assert bundle.topic == "Practical TypeScript patterns for safer API boundaries"
        assert len(bundle.claims) == 2
        assert [c.source_url for c in bundle.claims] == [s.url for s in bundle.source_list]
        assert all(s.published_at == "2026-10-18" for s in bundle.source_list)

    @pytest.mark.asyncio
    async def test_aggregator_link_is_trusted(self, test_config):
        researcher = Researcher(config=test_config)
        selection = make_selection("Show HN: A tiny Kubernetes operator", SourceType.HN,
                                   "https://github.com/x/operator")
        bundle = await researcher.research(selection, today=TODAY)
        assert "https://github.com/x/operator" in bundle.source_urls()

    @pytest.mark.asyncio
    async def test_dated_aggregator_link_skipped(self, test_config):
        researcher = Researcher(config=test_config)
        url = f"https://blog.example.com/{datetime.now(timezone.utc):%Y-%m-%d}-launch"
        bundle = await researcher.research(make_selection("Launch notes", SourceType.TREND, url), today=TODAY)
        assert url not in bundle.source_urls()

    @pytest.mark.asyncio
    async def test_generated_sources_are_verified(self, test_config):
        generator = FakeGenerator({
            "sources": [
                {"title": "Invented", "url": "https://fake.example/2026-10-18-post"},
                {"title": "Also invented", "url": "https://fake.example/other"},
            ],
            "claims": [
                {"claim": "Docker images should be small.", "source_url": "https://fake.example/other",
                 "confidence": "high"},
            ],
        })
        researcher = Researcher(generator, test_config)
        bundle = await researcher.research(make_selection("Shipping Docker images"), today=TODAY)

        assert "https://fake.example/other" not in bundle.source_urls()
        assert bundle.claims[0].text == "Docker images should be small."
        assert bundle.claims[0].source_url in bundle.source_urls()
        assert generator.prompts

    @pytest.mark.asyncio
    async def test_unusable_generation_falls_back(self, test_config):
        researcher = Researcher(FakeGenerator(), test_config)
        bundle = await researcher.research(make_selection("Building reliable CI pipelines"), today=TODAY)
        assert bundle.claims[0].text.startswith("Incremental checks")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"sources": 5, "claims": []},
        {"claims": 7},
        {"sources": "https://a.example", "claims": {"claim": "one"}},
    ])
    async def test_malformed_generation_falls_back(self, test_config, payload):
        selection = make_selection("Building reliable CI pipelines")
        researcher = Researcher(FakeGenerator(payload), test_config)
        bundle = await researcher.research(selection, today=TODAY)

        trusted = researcher.trusted_sources(selection.selected.candidate)
        assert [s.url for s in bundle.source_list] == [s.url for s in trusted]
        assert bundle.claims[0].text.startswith("Incremental checks")

    @pytest.mark.asyncio
    async def test_bundle_round_trip(self, test_config):
        bundle = await Researcher(config=test_config).research(make_selection("Database indexing"), today=TODAY)
        assert ResearchBundle.from_dict(bundle.to_dict()) == bundle


class TestArticleWriter:
    """Tests for ArticleWriter.write."""

    @pytest.fixture
    def bundle(self):
        title = "How to design retry logic for distributed systems"
        sources = [replace(s, published_at="2026-10-18") for s in infer_reliable_sources(title)]
        claims = normalize_claims([{"claim": "Retries need a budget."}], sources)
        return ResearchBundle(topic=title, angle="Explain it.", claims=claims,
                              source_list=sources, category="backend_engineering")

    @pytest.mark.asyncio
    async def test_template_article(self, test_config, bundle):
        article = await ArticleWriter(config=test_config).write(bundle, today=TODAY)

        assert article.slug == "how-to-design-retry-logic-for-distributed-systems"
        assert article.date == "2026-10-18"
        assert article.canonical_url == f"https://example.dev/blog/{article.slug}"
        assert article.sources == bundle.source_list[:4]
        assert article.tags[:2] == ["engineering", "practical-guide"]
        assert article.summary.startswith("A practical guide to how to design retry logic")
        assert h2_headings(article.content_markdown) == [
            "Problem", "Core Idea", "Implementation", "Pitfalls", "Practical Checklist", "References",
        ]
        for source in bundle.source_list:
            assert source.url in article.content_markdown

    @pytest.mark.asyncio
    async def test_base_url_from_config(self, make_config, bundle):
        config = make_config(site={'base_url': 'https://blog.example.org/'})
        article = await ArticleWriter(config=config).write(bundle, today=TODAY)
        assert article.canonical_url.startswith("https://blog.example.org/blog/")

    @pytest.mark.asyncio
    async def test_generated_body_and_ignored_sources(self, test_config, bundle):
        generator = FakeGenerator({
            "summary": "Retries done right.",
            "content_markdown": "## Generated\n\nBody\n",
            "sources": [{"title": "Invented", "url": "https://fake.example/"}],
        })
        article = await ArticleWriter(generator, test_config).write(bundle, today=TODAY)
        assert article.summary == "Retries done right."
        assert article.content_markdown == "## Generated\n\nBody\n"
        assert all(s.url != "https://fake.example/" for s in article.sources)

    @pytest.mark.asyncio
    async def test_invalid_generated_body_uses_template(self, test_config, bundle):
        generator = FakeGenerator({"summary": 42, "content_markdown": ["not", "text"]})
        article = await ArticleWriter(generator, test_config).write(bundle, today=TODAY)
        assert "## Problem" in article.content_markdown
        assert article.summary.startswith("A practical guide")
