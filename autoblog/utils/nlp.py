"""
Keyword tables and rule-based text analysis for autoblog.
"""
import re
from functools import lru_cache
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

# Scoring keyword tables, one entry per signal
DEFAULT_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'practical': (
        'how to', 'build', 'building', 'design', 'implement', 'migration',
        'performance', 'security', 'testing', 'ci', 'api',
    ),
    'opinion': (
        'why', 'opinion', 'rant', 'thoughts on', 'unpopular', 'i think',
    ),
    'trend': (
        'ai', 'llm', 'agent', 'agents', 'release', 'v1', 'typescript', 'react',
        'next', 'rust', 'kubernetes', 'webassembly',
        '인공지능', '에이전트', '오픈소스',
    ),
    'intent': (
        'guide', 'checklist', 'vs', 'tutorial', 'best practices', 'how to',
        'step by step', 'comparison', 'explained', 'patterns',
    ),
    'high_demand': (
        'kubernetes', 'docker', 'postgres', 'python', 'typescript', 'react',
        'aws', 'security', 'observability', 'cost',
    ),
})

# Category keywords, checked when a candidate has no feed category
CATEGORY_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'ai_news': ('ai', 'llm', 'gpt', 'agent', 'agents', 'machine learning', 'model', 'openai', '인공지능'),
    'frontend': ('react', 'next.js', 'css', 'browser', 'frontend', 'web', 'javascript', 'typescript'),
    'spring_backend': ('spring', 'spring boot', 'java', 'kotlin', 'jvm'),
    'backend_engineering': ('api', 'database', 'postgres', 'retry', 'distributed', 'backend', 'queue'),
    'cloud_platform': ('aws', 'gcp', 'azure', 'kubernetes', 'docker', 'serverless', 'cloud'),
    'architecture': ('architecture', 'design', 'microservices', 'monolith', 'patterns', 'refactoring'),
    'scm': ('supply chain', 'logistics', 'inventory', 'procurement'),
    'software': ('ci', 'testing', 'git', 'pipeline', 'tooling', 'release'),
})

# (trigger keywords, tags added) pairs; first match wins
TAG_RULES: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (('typescript',), ('typescript', 'api')),
    (('ci', 'pipeline'), ('ci-cd', 'automation')),
    (('docker', 'kubernetes'), ('devops', 'infrastructure')),
    (('ai', 'llm', 'agent', 'agents'), ('ai', 'llm')),
)
BASE_TAGS = ('engineering', 'practical-guide')
DEFAULT_TAGS = ('architecture', 'backend')
MAX_TAGS = 6


@lru_cache(maxsize=1024)
def _keyword_pattern(keyword: str):
    return re.compile(r'(?<![a-z0-9])' + re.escape(keyword) + r'(?![a-z0-9])')


def keyword_in_text(keyword: str, text: str) -> bool:
    """
    Check whether a keyword occurs in already-lowercased text.

    ASCII keywords must match on word boundaries ("ai" does not match
    "email"); non-ASCII keywords match as substrings because scripts such as
    Hangul attach particles directly to words.

    Args:
        keyword: Lowercase keyword or phrase
        text: Lowercased text to search

    Returns:
        True if the keyword occurs
    """
    if not keyword:
        return False
    if keyword.isascii():
        return bool(_keyword_pattern(keyword).search(text))
    return keyword in text


class TextAnalyzer:
    """
    Rule-based analyzer over declarative keyword tables.
    """
    def __init__(self, keywords: Optional[Mapping[str, Sequence[str]]] = None,
                 categories: Optional[Mapping[str, Sequence[str]]] = None):
        """
        Initialize the analyzer.

        Args:
            keywords: Signal name -> keywords table (defaults to DEFAULT_KEYWORDS)
            categories: Category -> keywords table (defaults to CATEGORY_KEYWORDS)
        """
        self.keywords = keywords if keywords is not None else DEFAULT_KEYWORDS
        self.categories = categories if categories is not None else CATEGORY_KEYWORDS

    def matches(self, text: str, table: str) -> List[str]:
        """
        Return the keywords of ``table`` found in ``text``.

        Args:
            text: Text to inspect
            table: Name of the keyword table (e.g. 'practical')

        Returns:
            Matched keywords, in table order
        """
        lower = (text or '').lower()
        return [kw for kw in self.keywords.get(table, ()) if keyword_in_text(kw, lower)]

    def count(self, text: str, table: str) -> int:
        return len(self.matches(text, table))

    def classify_text(self, text: str, default: str = 'software') -> Tuple[str, float]:
        """
        Classify text into one of the configured categories.

        Args:
            text: The text to classify (usually a title)
            default: Category returned when nothing matches

        Returns:
            Tuple of (category, confidence_score)
        """
        lower = (text or '').lower()
        scores = {}
        for category, keywords in self.categories.items():
            scores[category] = sum(1 for kw in keywords if keyword_in_text(kw, lower))

        if not scores or max(scores.values()) == 0:
            return default, 0.0

        # max() keeps the first category on ties, so table order is the tie-break
        best_category = max(scores.items(), key=lambda x: x[1])
        total_score = sum(scores.values())
        return best_category[0], min(1.0, best_category[1] / total_score)

    def infer_tags(self, title: str) -> List[str]:
        """Pick post tags for a title."""
        lower = (title or '').lower()
        tags = list(BASE_TAGS)
        for triggers, extra in TAG_RULES:
            if any(keyword_in_text(kw, lower) for kw in triggers):
                tags.extend(extra)
                break
        else:
            tags.extend(DEFAULT_TAGS)
        return tags[:MAX_TAGS]
