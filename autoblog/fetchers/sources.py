"""
Static source data: trend feeds, fallback topic pool and trusted references.

Everything here is immutable; components take these as defaults and accept
replacements, so tests and deployments can swap them out.
"""
from typing import NamedTuple, Tuple


class FeedSpec(NamedTuple):
    category: str
    source: str
    url: str


class SourceRule(NamedTuple):
    keywords: Tuple[str, ...]
    sources: Tuple[Tuple[str, str], ...]  # (title, url)


TREND_FEEDS: Tuple[FeedSpec, ...] = (
    FeedSpec("software", "GeekNews", "https://news.hada.io/rss/news"),
    FeedSpec("ai_news", "WIRED AI", "https://www.wired.com/feed/tag/ai/latest/rss"),
    FeedSpec("ai_news", "Google AI Blog", "https://ai.googleblog.com/feeds/posts/default"),
    FeedSpec("frontend", "web.dev", "https://web.dev/feed.xml"),
    FeedSpec("software", "TypeScript Blog", "https://devblogs.microsoft.com/typescript/feed/"),
    FeedSpec("spring_backend", "Spring Blog", "https://spring.io/blog.atom"),
    FeedSpec("backend_engineering", "InfoQ", "https://www.infoq.com/feed/"),
    FeedSpec("cloud_platform", "GCP Release Notes", "https://cloud.google.com/feeds/gcp-release-notes.xml"),
    FeedSpec("scm", "Supply Chain Dive", "https://www.supplychaindive.com/feeds/news/"),
    FeedSpec("architecture", "Martin Fowler", "https://martinfowler.com/feed.atom"),
    FeedSpec("cloud_platform", "Azure Updates", "https://azure.microsoft.com/updates/feed/"),
)

FALLBACK_TOPICS: Tuple[str, ...] = (
    "Practical TypeScript patterns for safer API boundaries",
    "How to design retry logic for distributed systems",
    "Building reliable CI pipelines with incremental checks",
    "Feature flags in modern web applications",
    "Database indexing strategies every backend engineer should know",
)

KEYWORD_SOURCE_MAP: Tuple[SourceRule, ...] = (
    SourceRule(
        ("typescript", "ts"),
        (
            ("TypeScript Handbook", "https://www.typescriptlang.org/docs/"),
            ("TypeScript 5.x Release Notes", "https://devblogs.microsoft.com/typescript/"),
        ),
    ),
    SourceRule(
        ("react", "next.js", "next"),
        (
            ("React Docs", "https://react.dev/"),
            ("Next.js Docs", "https://nextjs.org/docs"),
        ),
    ),
    SourceRule(
        ("node", "node.js", "express"),
        (
            ("Node.js Documentation", "https://nodejs.org/en/docs"),
            ("Express Guide", "https://expressjs.com/en/guide/routing.html"),
        ),
    ),
    SourceRule(
        ("docker", "container", "kubernetes", "k8s"),
        (
            ("Docker Docs", "https://docs.docker.com/"),
            ("Kubernetes Docs", "https://kubernetes.io/docs/"),
        ),
    ),
)

FALLBACK_SOURCES: Tuple[Tuple[str, str], ...] = (
    ("GitHub Engineering Blog", "https://github.blog/engineering/"),
    ("Cloudflare Blog", "https://blog.cloudflare.com/"),
    ("Martin Fowler", "https://martinfowler.com/"),
)
