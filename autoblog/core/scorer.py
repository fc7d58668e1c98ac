"""
Topic candidate scoring for autoblog.
"""
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from autoblog.core.models import ScoredCandidate, SourceType, TopicCandidate
from autoblog.utils.nlp import TextAnalyzer
from autoblog.utils.text import max_similarity

UTILITY_BASE = 55
UTILITY_PRACTICAL_BONUS = 10
UTILITY_OPINION_PENALTY = 15
TREND_BASE = 50
TREND_BONUS = 12
INTENT_BASE = 45
INTENT_PHRASE_BONUS = 12
INTENT_DEMAND_BONUS = 8

# Fixed weights layered on top of the configurable ones
SEARCH_INTENT_WEIGHT = 0.2
SOURCE_PRIORITY_WEIGHT = 0.15

SOURCE_PRIORITY = {
    SourceType.TREND: 100,
    SourceType.HN: 85,
    SourceType.POOL: 40,
}


@dataclass(frozen=True)
class ScoreWeights:
    novelty: float = 0.4
    utility: float = 0.35
    trend: float = 0.25

    @classmethod
    def from_config(cls, config) -> 'ScoreWeights':
        return cls(
            novelty=float(config.get('topic_selection.novelty_weight', 0.4)),
            utility=float(config.get('topic_selection.utility_weight', 0.35)),
            trend=float(config.get('topic_selection.trend_weight', 0.25)),
        )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


class CandidateScorer:
    """
    Deterministic fitness scoring for topic candidates.

    With no history every candidate gets novelty 100; on a cold start the
    ranking is decided by utility, trend, search intent and source priority.
    """
    def __init__(self, analyzer: Optional[TextAnalyzer] = None):
        self.analyzer = analyzer or TextAnalyzer()

    def novelty(self, title: str, history_titles: Iterable[str]) -> int:
        return round_half_up((1 - max_similarity(title, history_titles)) * 100)

    def utility(self, title: str) -> int:
        practical = self.analyzer.count(title, 'practical')
        opinion = self.analyzer.count(title, 'opinion')
        return _clamp(UTILITY_BASE + practical * UTILITY_PRACTICAL_BONUS - opinion * UTILITY_OPINION_PENALTY)

    def trend(self, title: str) -> int:
        return _clamp(TREND_BASE + self.analyzer.count(title, 'trend') * TREND_BONUS)

    def search_intent(self, title: str) -> int:
        phrases = self.analyzer.count(title, 'intent')
        demand = self.analyzer.count(title, 'high_demand')
        return _clamp(INTENT_BASE + phrases * INTENT_PHRASE_BONUS + demand * INTENT_DEMAND_BONUS)

    def score(self, candidate: TopicCandidate, history_titles: Sequence[str],
              weights: Optional[ScoreWeights] = None) -> ScoredCandidate:
        """
        Score a single candidate.

        Args:
            candidate: Candidate to score
            history_titles: Titles already published or tried
            weights: Novelty/utility/trend weights

        Returns:
            ScoredCandidate with all components and the (unclamped) total
        """
        weights = weights or ScoreWeights()
        title = candidate.title

        novelty = self.novelty(title, history_titles)
        utility = self.utility(title)
        trend = self.trend(title)
        search_intent = self.search_intent(title)
        source_priority = SOURCE_PRIORITY.get(candidate.source_type, SOURCE_PRIORITY[SourceType.POOL])

        total = round_half_up(
            novelty * weights.novelty
            + utility * weights.utility
            + trend * weights.trend
            + search_intent * SEARCH_INTENT_WEIGHT
            + source_priority * SOURCE_PRIORITY_WEIGHT
        )

        return ScoredCandidate(
            candidate=candidate,
            novelty=novelty,
            utility=utility,
            trend=trend,
            search_intent=search_intent,
            source_priority=source_priority,
            total=total,
        )

    def rank(self, candidates: Iterable[TopicCandidate], history_titles: Sequence[str],
             weights: Optional[ScoreWeights] = None) -> List[ScoredCandidate]:
        """
        Score and sort candidates, best first.

        ``sorted`` is stable, so candidates with equal totals keep their input
        order.
        """
        history = list(history_titles)
        scored = [self.score(candidate, history, weights) for candidate in candidates]
        return sorted(scored, key=lambda c: c.total, reverse=True)
