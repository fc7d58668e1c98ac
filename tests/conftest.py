"""
Pytest configuration and fixtures for autoblog tests.
"""

import sys
import pytest
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autoblog.config import Config
from autoblog.core.models import Article, Source


# ============================================================
# Fakes for network collaborators
# ============================================================

class FakeChecker:
    """Reachability checker answering from a fixed set of URLs."""

    def __init__(self, reachable=None, default=True):
        self.reachable = set(reachable or ())
        self.default = default
        self.calls = []

    async def __call__(self, url):
        self.calls.append(url)
        if self.reachable:
            return url in self.reachable
        return self.default


class FakeGenerator:
    """Structured generator returning canned payloads in order."""

    def __init__(self, *payloads):
        self.payloads = list(payloads)
        self.prompts = []

    @property
    def available(self):
        return True

    async def generate(self, system_prompt, user_prompt):
        self.prompts.append((system_prompt, user_prompt))
        if not self.payloads:
            return None
        return self.payloads.pop(0)


class FakeFeedFetcher:
    def __init__(self, entries=None, error=None):
        self.entries = entries or []
        self.error = error

    async def fetch_entries(self, max_per_feed=6, session=None):
        if self.error:
            raise self.error
        return list(self.entries)


class FakeHackerNews:
    def __init__(self, stories=None):
        self.stories = stories or []

    async def fetch_stories(self, limit=12, session=None):
        return list(self.stories[:limit])


# ============================================================
# Configuration Fixtures
# ============================================================

@pytest.fixture
def make_config(tmp_path):
    """Build an isolated Config rooted in a temporary directory."""

    def _make(**overrides):
        base = {
            'state': {
                'directory': str(tmp_path / 'state'),
                'out_directory': str(tmp_path / 'out'),
            },
            'content': {'directory': str(tmp_path / 'posts')},
            'openai': {'api_key': ''},
        }
        for section, values in overrides.items():
            base.setdefault(section, {}).update(values)
        return Config(overrides=base, use_env=False)

    return _make


@pytest.fixture
def test_config(make_config):
    return make_config()


# ============================================================
# Sample Data Fixtures
# ============================================================

def long_body(words=950, references=True):
    """Markdown body with four sections and plenty of distinct prose."""
    filler = " ".join(f"word{i}" for i in range(words))
    body = (
        "## Problem\n\nRetries without limits amplify outages.\n\n"
        "## Core Idea\n\nBound every retry by a budget.\n\n"
        f"## Implementation\n\n{filler}\n\n"
        "```python\nprint('code is not counted')\n```\n\n"
        "## Pitfalls\n\nNon-idempotent writes.\n\n"
    )
    if references:
        body += (
            "## References\n\n"
            "- [Docker Docs](https://docs.docker.com/)\n"
            "- [Kubernetes Docs](https://kubernetes.io/docs/)\n"
        )
    return body


@pytest.fixture
def sample_sources():
    return [
        Source(title="Docker Docs", url="https://docs.docker.com/", published_at="2026-10-01"),
        Source(title="Kubernetes Docs", url="https://kubernetes.io/docs/", published_at="2026-10-01"),
    ]


@pytest.fixture
def make_article(sample_sources):
    """Build a valid article, overriding any field."""

    def _make(**fields):
        data = dict(
            title="How to design retry logic for distributed systems",
            summary="A practical guide to retry logic, with concrete implementation details.",
            slug="how-to-design-retry-logic-for-distributed-systems",
            date="2026-10-18",
            tags=["engineering", "practical-guide"],
            category="backend_engineering",
            canonical_url="https://example.dev/blog/how-to-design-retry-logic-for-distributed-systems",
            sources=list(sample_sources),
            content_markdown=long_body(),
        )
        data.update(fields)
        return Article(**data)

    return _make
