"""
Unit tests for the quality gate.
"""

import pytest
from datetime import datetime, timedelta, timezone

from conftest import FakeChecker, long_body
from autoblog.core.models import Article, Source
from autoblog.core.quality import QualityGate, compute_score, h2_headings, is_fabricated_url

NOW = datetime(2026, 10, 18, 12, 0, 0)


@pytest.fixture
def gate(test_config):
    return QualityGate(test_config, checker=FakeChecker())


class TestPassingDraft:
    """Tests for a draft that satisfies every check."""

    @pytest.mark.asyncio
    async def test_passes(self, gate, make_article):
        report = await gate.evaluate(make_article(), [], now=NOW)
        assert report.passed
        assert report.score == 100
        assert report.reasons == ()
        assert report.actions == ("Ready to publish",)

    @pytest.mark.asyncio
    async def test_report_serializes_with_pass_key(self, gate, make_article):
        report = await gate.evaluate(make_article(), [], now=NOW)
        data = report.to_dict()
        assert data["pass"] is True
        assert set(data) == {"pass", "score", "reasons", "warnings", "actions"}


class TestDuplication:
    """Tests for the duplicate-content check."""

    @pytest.mark.asyncio
    async def test_identical_body_fails(self, gate, make_article):
        article = make_article()
        report = await gate.evaluate(article, [article.content_markdown], now=NOW)
        assert not report.passed
        assert any("Duplicate risk" in reason for reason in report.reasons)
        assert report.score <= 70

    @pytest.mark.asyncio
    async def test_similar_body_warns(self, gate, make_article):
        article = make_article()
        extra = " ".join(f"extra{i}" for i in range(250))
        report = await gate.evaluate(article, [article.content_markdown + extra], now=NOW)
        assert report.passed
        assert len(report.warnings) == 1
        assert report.score == 90


class TestFabricatedUrls:
    """Tests for the fabricated-URL heuristic."""

    def test_todays_date(self):
        assert is_fabricated_url("https://blog.example.com/2026-10-18-article", NOW)
        assert is_fabricated_url("https://blog.example.com/posts?d=2026-10-18", NOW)

    def test_recent_dated_path(self):
        assert is_fabricated_url("https://blog.example.com/2026-10-14/launch", NOW)
        assert is_fabricated_url("https://blog.example.com/2026-10-20-preview", NOW)

    def test_old_dated_path(self):
        assert not is_fabricated_url("https://blog.example.com/2026-09-01-launch", NOW)

    def test_missing_url(self):
        assert is_fabricated_url("", NOW)
        assert is_fabricated_url(None, NOW)

    def test_invalid_date_is_ignored(self):
        assert not is_fabricated_url("https://blog.example.com/2026-13-45-x", NOW)

    def test_plain_url(self):
        assert not is_fabricated_url("https://docs.docker.com/", NOW)

    def test_today_is_the_utc_date(self):
        seoul_early_morning = datetime(2026, 10, 19, 1, 0, tzinfo=timezone(timedelta(hours=9)))
        assert is_fabricated_url("https://blog.example.com/posts?d=2026-10-18", seoul_early_morning)
        assert not is_fabricated_url("https://blog.example.com/posts?d=2026-10-19", seoul_early_morning)

    @pytest.mark.asyncio
    async def test_fabricated_source_fails_and_is_not_probed(self, test_config, make_article):
        checker = FakeChecker()
        gate = QualityGate(test_config, checker=checker)
        fake = "https://blog.example.com/2026-10-18-article"
        article = make_article(sources=[
            Source("Docker Docs", "https://docs.docker.com/"),
            Source("Invented", fake),
        ])

        report = await gate.evaluate(article, [], now=NOW)

        assert not report.passed
        assert any("fabricated" in reason for reason in report.reasons)
        assert any("reachable source links" in reason for reason in report.reasons)
        assert fake not in checker.calls


class TestReachability:
    """Tests for the reachability check."""

    @pytest.mark.asyncio
    async def test_unreachable_sources_fail(self, test_config, make_article):
        gate = QualityGate(test_config, checker=FakeChecker(default=False))
        report = await gate.evaluate(make_article(), [], now=NOW)
        assert not report.passed
        assert report.reasons == ("At least 2 reachable source links are required (found 0).",)

    @pytest.mark.asyncio
    async def test_only_first_sources_probed(self, test_config, make_article):
        checker = FakeChecker()
        gate = QualityGate(test_config, checker=checker)
        sources = [Source(f"S{i}", f"https://s{i}.example/") for i in range(12)]
        await gate.evaluate(make_article(sources=sources), [], now=NOW)
        assert checker.calls == [s.url for s in sources[:8]]

    @pytest.mark.asyncio
    async def test_disabled_reachability_warns(self, make_config, make_article):
        config = make_config(quality={'check_reachability': False})
        gate = QualityGate(config, checker=FakeChecker(default=False))
        report = await gate.evaluate(make_article(), [], now=NOW)
        assert report.passed
        assert report.warnings == ("Source reachability was not checked.",)
        assert report.score == 90


class TestStructure:
    """Tests for headings, word count and schema checks."""

    def test_headings_in_code_fences_ignored(self):
        markdown = "## One\n\n```\n## Not a heading\n```\n\n### Three\n\n## Two ##\n"
        assert h2_headings(markdown) == ["One", "Two"]

    @pytest.mark.asyncio
    async def test_missing_references(self, gate, make_article):
        article = make_article(content_markdown=long_body(references=False))
        report = await gate.evaluate(article, [], now=NOW)
        assert report.reasons == ("References section is required.",)

    @pytest.mark.asyncio
    async def test_korean_references_heading(self, gate, make_article):
        body = long_body(references=False) + "## 참고 자료\n\n- [Docker Docs](https://docs.docker.com/)\n"
        report = await gate.evaluate(make_article(content_markdown=body), [], now=NOW)
        assert report.passed

    @pytest.mark.asyncio
    async def test_references_heading_prefix(self, gate, make_article):
        body = long_body(references=False) + "## References and further reading\n\n- [Docker Docs](https://docs.docker.com/)\n"
        report = await gate.evaluate(make_article(content_markdown=body), [], now=NOW)
        assert report.passed

    @pytest.mark.asyncio
    async def test_too_few_sections(self, gate, make_article):
        body = "## Intro\n\n" + " ".join(f"w{i}" for i in range(1000)) + "\n\n## References\n\n- x\n"
        report = await gate.evaluate(make_article(content_markdown=body), [], now=NOW)
        assert report.reasons == ("At least 4 H2 sections are required (found 2).",)

    @pytest.mark.asyncio
    async def test_required_sections(self, make_config, make_article):
        config = make_config(quality={'required_sections': ['Problem', 'Checklist']})
        gate = QualityGate(config, checker=FakeChecker())
        report = await gate.evaluate(make_article(), [], now=NOW)
        assert report.reasons == ("Missing required sections: Checklist.",)

    @pytest.mark.asyncio
    async def test_word_count(self, gate, make_article):
        article = make_article(content_markdown=long_body(words=100))
        report = await gate.evaluate(article, [], now=NOW)
        assert len(report.reasons) == 1
        assert report.reasons[0].startswith("Minimum word count not met")

    @pytest.mark.asyncio
    async def test_schema_violations(self, gate, make_article):
        article = make_article(slug="Not A Slug!", tags=[])
        report = await gate.evaluate(article, [], now=NOW)
        assert not report.passed
        paths = [r for r in report.reasons if r.startswith("Schema violation")]
        assert len(paths) == 2
        assert any("/slug" in r for r in paths)
        assert any("/tags" in r for r in paths)

    @pytest.mark.asyncio
    async def test_missing_summary_reported(self, gate, make_article):
        report = await gate.evaluate(make_article(summary=None), [], now=NOW)
        assert not report.passed
        assert report.reasons == ("Schema violation at /: 'summary' is a required property",)
        assert report.warnings == ()

    @pytest.mark.asyncio
    async def test_stored_draft_with_missing_fields(self, gate, make_article):
        data = make_article().to_dict()
        del data["slug"]
        del data["content_markdown"]

        report = await gate.evaluate(Article.from_dict(data), [], now=NOW)

        assert not report.passed
        assert "Schema violation at /: 'slug' is a required property" in report.reasons
        assert "Schema violation at /: 'content_markdown' is a required property" in report.reasons
        assert "References section is required." in report.reasons

    @pytest.mark.asyncio
    async def test_too_few_citations(self, gate, make_article, sample_sources):
        report = await gate.evaluate(make_article(sources=sample_sources[:1]), [], now=NOW)
        assert "At least 2 citations are required." in report.reasons

    @pytest.mark.asyncio
    async def test_long_summary_warns(self, gate, make_article):
        report = await gate.evaluate(make_article(summary="x" * 301), [], now=NOW)
        assert report.passed
        assert len(report.warnings) == 1


class TestScoring:
    """Tests for score computation."""

    @pytest.mark.asyncio
    async def test_all_checks_run(self, gate, make_article):
        body = "too short"
        report = await gate.evaluate(make_article(content_markdown=body), [body], now=NOW)
        # sections, references, duplicate, word count
        assert len(report.reasons) == 4
        assert report.score == 0

    def test_score_formula(self):
        assert compute_score([], []) == 100
        assert compute_score(["r"], ["w"]) == 60
        assert compute_score(["r"] * 5, []) == 0
