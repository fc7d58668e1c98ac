"""
Pipeline data model for autoblog.

Every record serializes to the snake_case JSON used by the state files.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Set

CONFIDENCE_LEVELS = ('low', 'medium', 'high')


class SourceType(str, Enum):
    """Where a topic candidate came from."""
    POOL = 'pool'
    HN = 'hn'
    TREND = 'trend'


@dataclass(frozen=True)
class TopicCandidate:
    """
    A raw topic idea produced by an aggregator.
    """
    title: str
    category: str = 'software'
    source_type: SourceType = SourceType.POOL
    source_url: Optional[str] = None
    published_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'category': self.category,
            'source_type': self.source_type.value,
            'source_url': self.source_url,
            'published_at': self.published_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TopicCandidate':
        return cls(
            title=data['title'],
            category=data.get('category') or 'software',
            source_type=SourceType(data.get('source_type') or 'pool'),
            source_url=data.get('source_url'),
            published_at=data.get('published_at'),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """
    A topic candidate with its fitness components.

    ``total`` is not clamped: the search-intent and source-priority terms are
    layered on top of weights that already sum to 1.0.
    """
    candidate: TopicCandidate
    novelty: int
    utility: int
    trend: int
    search_intent: int
    source_priority: int
    total: int

    @property
    def title(self) -> str:
        return self.candidate.title

    def to_dict(self) -> Dict[str, Any]:
        data = self.candidate.to_dict()
        data.update({
            'novelty': self.novelty,
            'utility': self.utility,
            'trend': self.trend,
            'search_intent': self.search_intent,
            'source_priority': self.source_priority,
            'total': self.total,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoredCandidate':
        return cls(
            candidate=TopicCandidate.from_dict(data),
            novelty=int(data.get('novelty', 0)),
            utility=int(data.get('utility', 0)),
            trend=int(data.get('trend', 0)),
            search_intent=int(data.get('search_intent', 0)),
            source_priority=int(data.get('source_priority', 0)),
            total=int(data.get('total', 0)),
        )


@dataclass(frozen=True)
class Source:
    """A citable reference. ``url`` is the identity of a source."""
    title: str
    url: str
    published_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'title': self.title, 'url': self.url, 'published_at': self.published_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Source':
        return cls(
            title=str(data.get('title') or ''),
            url=str(data.get('url') or ''),
            published_at=data.get('published_at'),
        )


@dataclass(frozen=True)
class Claim:
    """A statement backed by one source of the same research bundle."""
    text: str
    source_url: str
    source_title: str
    confidence: str = 'medium'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'claim': self.text,
            'source_url': self.source_url,
            'source_title': self.source_title,
            'confidence': self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Claim':
        return cls(
            text=str(data.get('claim') or data.get('text') or ''),
            source_url=str(data.get('source_url') or ''),
            source_title=str(data.get('source_title') or ''),
            confidence=data.get('confidence') or 'medium',
        )


@dataclass
class ResearchBundle:
    """
    Claims and sources gathered for one attempt's topic.
    """
    topic: str
    angle: str
    claims: List[Claim] = field(default_factory=list)
    source_list: List[Source] = field(default_factory=list)
    category: str = 'software'

    def source_urls(self) -> Set[str]:
        return {source.url for source in self.source_list}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'topic': self.topic,
            'angle': self.angle,
            'category': self.category,
            'claims': [claim.to_dict() for claim in self.claims],
            'conflicts': [],
            'source_list': [source.to_dict() for source in self.source_list],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResearchBundle':
        return cls(
            topic=data['topic'],
            angle=data.get('angle', ''),
            claims=[Claim.from_dict(c) for c in data.get('claims') or []],
            source_list=[Source.from_dict(s) for s in data.get('source_list') or []],
            category=data.get('category') or 'software',
        )


@dataclass
class Article:
    """
    A drafted post. Read-only once the writer hands it over.
    """
    title: str
    summary: str
    slug: str
    date: str
    tags: List[str]
    category: str
    canonical_url: str
    sources: List[Source]
    content_markdown: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'summary': self.summary,
            'slug': self.slug,
            'date': self.date,
            'tags': list(self.tags),
            'category': self.category,
            'canonical_url': self.canonical_url,
            'sources': [source.to_dict() for source in self.sources],
            'content_markdown': self.content_markdown,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        """Load a stored draft; missing fields stay None so the gate can report them."""
        tags = data.get('tags')
        sources = data.get('sources')
        return cls(
            title=data.get('title'),
            summary=data.get('summary'),
            slug=data.get('slug'),
            date=data.get('date'),
            tags=list(tags) if isinstance(tags, (list, tuple)) else [],
            category=data.get('category') or 'software',
            canonical_url=data.get('canonical_url'),
            sources=[Source.from_dict(s) for s in sources if isinstance(s, dict)]
            if isinstance(sources, list) else [],
            content_markdown=data.get('content_markdown'),
        )


@dataclass(frozen=True)
class QualityReport:
    """
    Outcome of the quality gate for one draft. Never mutated after creation.
    """
    passed: bool
    score: int
    reasons: tuple = ()
    warnings: tuple = ()
    actions: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pass': self.passed,
            'score': self.score,
            'reasons': list(self.reasons),
            'warnings': list(self.warnings),
            'actions': list(self.actions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QualityReport':
        return cls(
            passed=bool(data.get('pass')),
            score=int(data.get('score', 0)),
            reasons=tuple(data.get('reasons') or ()),
            warnings=tuple(data.get('warnings') or ()),
            actions=tuple(data.get('actions') or ()),
        )


@dataclass
class TopicSelection:
    """
    Result of the planning stage.
    """
    selected: ScoredCandidate
    fallback: ScoredCandidate
    angle: str
    candidates: List[ScoredCandidate] = field(default_factory=list)
    date: Optional[str] = None
    fallback_angle: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'selected_topic': dict(self.selected.to_dict(), angle=self.angle, score=self.selected.total),
            'fallback_topic': dict(self.fallback.to_dict(), angle=self.fallback_angle, score=self.fallback.total),
            'candidates': [c.to_dict() for c in self.candidates],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TopicSelection':
        selected = data['selected_topic']
        fallback = data.get('fallback_topic') or selected
        return cls(
            selected=ScoredCandidate.from_dict(selected),
            fallback=ScoredCandidate.from_dict(fallback),
            angle=selected.get('angle', ''),
            candidates=[ScoredCandidate.from_dict(c) for c in data.get('candidates') or []],
            date=data.get('date'),
            fallback_angle=fallback.get('angle', ''),
        )


@dataclass
class BatchState:
    """
    Mutable bookkeeping owned by the batch orchestrator.
    """
    target_count: int
    max_attempts: int
    success_count: int = 0
    attempt: int = 0
    excluded_titles: Set[str] = field(default_factory=set)

    @property
    def done(self) -> bool:
        return self.success_count >= self.target_count

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts and not self.done

    def to_dict(self) -> Dict[str, Any]:
        return {
            'target_count': self.target_count,
            'success_count': self.success_count,
            'attempt': self.attempt,
            'max_attempts': self.max_attempts,
            'excluded_titles': sorted(self.excluded_titles),
        }


def with_title(source: Source, title: str) -> Source:
    """Return ``source`` renamed to ``title`` when a non-empty title is given."""
    title = (title or '').strip()
    return replace(source, title=title) if title else source
