"""
Topic planning: gather candidates, score them and pick one.
"""
import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from autoblog.config import config as default_config
from autoblog.core.errors import StageError
from autoblog.core.models import SourceType, TopicCandidate, TopicSelection
from autoblog.core.scorer import CandidateScorer, ScoreWeights
from autoblog.fetchers.sources import FALLBACK_TOPICS
from autoblog.utils.nlp import TextAnalyzer
from autoblog.utils.text import normalize_title

# Configure logging
logger = logging.getLogger(__name__)

SELECTED_ANGLE = "Explain the concept with implementation steps and concrete tradeoffs."
FALLBACK_ANGLE = "Cover a pragmatic migration path and failure modes."
REPORTED_CANDIDATES = 8


class TopicPlanner:
    """
    Selects the next topic to write about.
    """
    def __init__(self, library, scorer: Optional[CandidateScorer] = None, feed_fetcher=None,
                 hn_fetcher=None, pool: Sequence[str] = FALLBACK_TOPICS, config=None,
                 analyzer: Optional[TextAnalyzer] = None):
        """
        Initialize the planner.

        Args:
            library: PostLibrary providing the titles already published
            scorer: Candidate scorer
            feed_fetcher: TrendFeedFetcher, or None to skip trend feeds
            hn_fetcher: HackerNewsFetcher, or None to skip Hacker News
            pool: Static topics that are always available
            config: Config instance (defaults to the global configuration)
            analyzer: TextAnalyzer used to classify uncategorized candidates
        """
        self.library = library
        self.analyzer = analyzer or TextAnalyzer()
        self.scorer = scorer or CandidateScorer(self.analyzer)
        self.feed_fetcher = feed_fetcher
        self.hn_fetcher = hn_fetcher
        self.pool = tuple(pool)
        self.config = config or default_config
        self.weights = ScoreWeights.from_config(self.config)
        self.max_candidates = int(self.config.get('topic_selection.max_candidates', 20))
        self.max_per_feed = int(self.config.get('topic_selection.max_per_feed', 6))
        self.hn_limit = int(self.config.get('topic_selection.hn_top_stories', 12))

    async def _fetch_trend(self) -> List[TopicCandidate]:
        if self.feed_fetcher is None:
            return []
        entries = await self.feed_fetcher.fetch_entries(max_per_feed=self.max_per_feed)
        return [
            TopicCandidate(
                title=entry['title'],
                category=entry.get('category') or self.analyzer.classify_text(entry['title'])[0],
                source_type=SourceType.TREND,
                source_url=entry.get('url'),
                published_at=entry.get('published_at') or None,
            )
            for entry in entries
        ]

    async def _fetch_hn(self) -> List[TopicCandidate]:
        if self.hn_fetcher is None:
            return []
        stories = await self.hn_fetcher.fetch_stories(limit=self.hn_limit)
        return [
            TopicCandidate(
                title=story['title'],
                category=self.analyzer.classify_text(story['title'])[0],
                source_type=SourceType.HN,
                source_url=story.get('url'),
            )
            for story in stories
        ]

    def _pool_candidates(self) -> List[TopicCandidate]:
        return [
            TopicCandidate(title=title, category=self.analyzer.classify_text(title)[0])
            for title in self.pool
        ]

    async def gather_candidates(self, excluded_titles: Iterable[str] = ()) -> List[TopicCandidate]:
        """
        Collect candidates from every aggregator.

        Trend feeds and Hacker News are fetched concurrently and merged only
        after both have settled; an aggregator that fails contributes nothing.
        Titles are deduplicated case-insensitively (first occurrence wins),
        excluded titles are dropped, and the pool is capped.

        Args:
            excluded_titles: Titles that must not be offered again

        Returns:
            Candidates in aggregator order: trend, Hacker News, static pool
        """
        results = await asyncio.gather(self._fetch_trend(), self._fetch_hn(), return_exceptions=True)

        merged: List[TopicCandidate] = []
        for name, result in zip(('trend feeds', 'Hacker News'), results):
            if isinstance(result, BaseException):
                logger.warning(f"Skipping {name}: {result}")
                continue
            merged.extend(result)
        merged.extend(self._pool_candidates())

        excluded = {normalize_title(title) for title in excluded_titles}
        seen = set()
        candidates = []
        for candidate in merged:
            key = normalize_title(candidate.title)
            if not key or key in seen or key in excluded:
                continue
            seen.add(key)
            candidates.append(candidate)

        return candidates[:self.max_candidates]

    async def plan(self, excluded_titles: Iterable[str] = ()) -> TopicSelection:
        """
        Pick the best topic that has not been published or tried yet.

        Args:
            excluded_titles: Titles already attempted in this batch

        Returns:
            TopicSelection with the selected and fallback topics

        Raises:
            StageError: if no candidate is left
        """
        excluded = list(excluded_titles)
        candidates = await self.gather_candidates(excluded)
        if not candidates:
            raise StageError('planning', "no topic candidates available")

        history = self.library.titles() + excluded
        ranked = self.scorer.rank(candidates, history, self.weights)

        selection = TopicSelection(
            selected=ranked[0],
            fallback=ranked[1] if len(ranked) > 1 else ranked[0],
            angle=SELECTED_ANGLE,
            candidates=ranked[:REPORTED_CANDIDATES],
            date=datetime.now().isoformat(timespec='seconds'),
            fallback_angle=FALLBACK_ANGLE,
        )
        logger.info(f"Topic selected: {selection.selected.title} (score {selection.selected.total})")
        return selection
