"""
Research stage: trusted sources and supporting claims for a topic.
"""
import json
import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Sequence

from autoblog.config import config as default_config
from autoblog.core.errors import StageError
from autoblog.core.models import ResearchBundle, Source, SourceType, TopicCandidate, TopicSelection
from autoblog.core.quality import is_fabricated_url
from autoblog.core.verifier import is_http_url, normalize_claims, verify_sources
from autoblog.fetchers.sources import FALLBACK_SOURCES, KEYWORD_SOURCE_MAP, SourceRule
from autoblog.utils.nlp import keyword_in_text

# Configure logging
logger = logging.getLogger(__name__)

MAX_INFERRED_SOURCES = 4

# (trigger keywords, claims) pairs; first match wins
CLAIM_RULES = (
    (('typescript',), (
        ("Stricter TypeScript boundaries reduce runtime contract mismatches.", 'high'),
        ("Combining runtime validation with static types improves API resilience.", 'high'),
    )),
    (('ci', 'pipeline'), (
        ("Incremental checks reduce CI latency while preserving confidence.", 'medium'),
        ("Fail-fast jobs and dependency caching are common CI optimization patterns.", 'high'),
    )),
)
DEFAULT_CLAIMS = (
    ("A small, iterative rollout strategy lowers production risk for new engineering practices.", 'high'),
    ("Tracking failure modes early improves maintainability and incident response.", 'high'),
)

SYSTEM_PROMPT = (
    "You are a research assistant for a software engineering blog. "
    "Reply with a JSON object with two keys: \"claims\", a list of objects with "
    "\"claim\", \"source_url\", \"source_title\" and \"confidence\" (low, medium or high), "
    "and \"sources\", a list of objects with \"title\" and \"url\". "
    "Only cite URLs from the provided reference list."
)


def infer_reliable_sources(title: str, rules: Sequence[SourceRule] = KEYWORD_SOURCE_MAP,
                           fallback=FALLBACK_SOURCES) -> List[Source]:
    """
    Map a topic title to well-known reference sites.

    Args:
        title: Topic title
        rules: Keyword -> sources table
        fallback: Sources used to pad a short match list

    Returns:
        Matched sources, or up to four sources padded with the fallback list
        when fewer than two matched
    """
    lower = (title or '').lower()
    matched = []
    for rule in rules:
        if any(keyword_in_text(kw, lower) for kw in rule.keywords):
            matched.extend(rule.sources)

    padded = len(matched) < 2
    if padded:
        matched = matched + list(fallback)

    sources = []
    seen = set()
    for source_title, url in matched:
        if url in seen:
            continue
        seen.add(url)
        sources.append(Source(title=source_title, url=url))

    return sources[:MAX_INFERRED_SOURCES] if padded else sources


class Researcher:
    """
    Builds a verified research bundle for the selected topic.
    """
    def __init__(self, generator=None, config=None):
        """
        Initialize the researcher.

        Args:
            generator: StructuredGenerator, or None to use deterministic claims only
            config: Config instance (defaults to the global configuration)
        """
        self.generator = generator
        self.config = config or default_config
        self.max_sources = int(self.config.get('research.max_sources', 6))
        self.allow_augment = bool(self.config.get('research.allow_source_augmentation', False))

    def trusted_sources(self, candidate: TopicCandidate) -> List[Source]:
        """
        Sources the pipeline vouches for without asking a generation service.

        The candidate's own link is trusted when it came from an aggregator,
        unless it carries a fresh date that the quality gate would reject.
        """
        sources = infer_reliable_sources(candidate.title)
        urls = {source.url for source in sources}
        url = candidate.source_url
        if (candidate.source_type != SourceType.POOL and is_http_url(url) and url not in urls
                and not is_fabricated_url(url, datetime.now(timezone.utc))):
            sources.append(Source(title=candidate.title, url=url))
        return sources[:self.max_sources]

    def deterministic_claims(self, topic: str) -> List[Dict[str, str]]:
        lower = (topic or '').lower()
        claims = DEFAULT_CLAIMS
        for triggers, rule_claims in CLAIM_RULES:
            if any(keyword_in_text(kw, lower) for kw in triggers):
                claims = rule_claims
                break
        return [{'claim': text, 'confidence': confidence} for text, confidence in claims]

    def _user_prompt(self, selection: TopicSelection, trusted: Sequence[Source]) -> str:
        return json.dumps({
            'topic': selection.selected.title,
            'angle': selection.angle,
            'category': selection.selected.candidate.category,
            'references': [{'title': s.title, 'url': s.url} for s in trusted],
            'max_claims': 6,
        }, ensure_ascii=False)

    async def research(self, selection: TopicSelection, today: Optional[date] = None) -> ResearchBundle:
        """
        Research the selected topic.

        Generated sources are verified against the trusted list and generated
        claims are re-attached to verified sources. Without a usable
        generation result the deterministic claim table is used.

        Args:
            selection: Output of the planning stage
            today: Date stamped on sources without a publication date

        Returns:
            ResearchBundle whose claims all cite a source of the bundle

        Raises:
            StageError: if no source could be established
        """
        candidate = selection.selected.candidate
        trusted = self.trusted_sources(candidate)
        if not trusted:
            raise StageError('researching', f"no trusted sources for {candidate.title!r}")

        source_list = trusted
        raw_claims = None

        if self.generator is not None:
            payload = await self.generator.generate(SYSTEM_PROMPT, self._user_prompt(selection, trusted))
            if payload:
                source_list = verify_sources(
                    payload.get('sources'),
                    trusted,
                    allow_augment=self.allow_augment,
                    max_sources=self.max_sources,
                )
                raw_claims = payload.get('claims')

        stamp = (today or date.today()).isoformat()
        source_list = [
            source if source.published_at else Source(source.title, source.url, stamp)
            for source in source_list
        ]

        claims = normalize_claims(raw_claims, source_list)
        if not claims:
            claims = normalize_claims(self.deterministic_claims(candidate.title), source_list)

        logger.info(f"Research bundle created with {len(source_list)} sources and {len(claims)} claims")
        return ResearchBundle(
            topic=candidate.title,
            angle=selection.angle,
            claims=claims,
            source_list=source_list,
            category=candidate.category,
        )
