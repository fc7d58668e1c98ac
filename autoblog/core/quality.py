"""
Quality gate for drafted articles.

Every check runs on every draft; a draft passes only when no check produced a
reason. Warnings lower the score but never block publication.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from autoblog.config import config as default_config
from autoblog.core.models import Article, QualityReport, Source
from autoblog.core.schema import validate_article_payload
from autoblog.utils.http import ReachabilityChecker
from autoblog.utils.text import count_words, max_similarity, strip_code_fences

# Configure logging
logger = logging.getLogger(__name__)

REFERENCE_HEADINGS = ('References', 'Sources', '참고 자료', '참고한 글')
REASON_PENALTY = 30
WARNING_PENALTY = 10
READY_ACTION = "Ready to publish"

_H2_RE = re.compile(r'^##[ \t]+(.+?)[ \t#]*$', re.MULTILINE)
_URL_DATE_RE = re.compile(r'/(\d{4}-\d{2}-\d{2})[-/]')

Checker = Callable[[str], Awaitable[bool]]


def h2_headings(markdown: str) -> List[str]:
    """Text of every level-2 heading outside code fences."""
    return [m.group(1).strip() for m in _H2_RE.finditer(strip_code_fences(markdown))]


def is_fabricated_url(url: Optional[str], now: datetime, window_days: float = 7) -> bool:
    """
    Flag URLs that look invented by a generation service.

    A URL is suspicious when it is missing, contains today's (UTC) date, or carries
    a ``/YYYY-MM-DD-`` or ``/YYYY-MM-DD/`` path segment within ``window_days``
    of ``now``.

    Args:
        url: Source URL
        now: Reference time
        window_days: How close to ``now`` a dated path must be to be flagged

    Returns:
        True if the URL should not be trusted
    """
    if not url or not isinstance(url, str):
        return True
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    if now.strftime('%Y-%m-%d') in url:
        return True

    match = _URL_DATE_RE.search(url)
    if match:
        try:
            url_date = datetime.strptime(match.group(1), '%Y-%m-%d')
        except ValueError:
            return False
        days = abs((now - url_date).total_seconds()) / 86400
        return days < window_days

    return False


def compute_score(reasons: Sequence[str], warnings: Sequence[str]) -> int:
    return max(0, 100 - REASON_PENALTY * len(reasons) - WARNING_PENALTY * len(warnings))


class QualityGate:
    """
    Decides whether a draft may be published.
    """
    def __init__(self, config=None, checker: Optional[Checker] = None):
        """
        Initialize the gate.

        Args:
            config: Config instance (defaults to the global configuration)
            checker: Async callable ``url -> bool`` used for reachability;
                defaults to a ReachabilityChecker built per evaluation
        """
        self.config = config or default_config
        self.checker = checker
        self.min_citations = int(self.config.get('quality.min_citations', 2))
        self.max_similarity = float(self.config.get('quality.max_similarity_with_existing_posts', 0.85))
        self.warn_similarity = float(self.config.get('quality.warn_similarity', 0.7))
        self.min_word_count = int(self.config.get('quality.min_word_count', 900))
        self.min_h2_sections = int(self.config.get('quality.min_h2_sections', 4))
        self.required_sections = list(self.config.get('quality.required_sections') or [])
        self.max_summary_length = int(self.config.get('quality.max_summary_length', 300))
        self.check_reachability = bool(self.config.get('quality.check_reachability', True))
        self.reachability_timeout = float(self.config.get('quality.reachability_timeout_seconds', 10))
        self.max_reachability_checks = int(self.config.get('quality.max_reachability_checks', 8))
        self.fabricated_window_days = float(self.config.get('quality.fabricated_window_days', 7))

    def _check_citations(self, article: Article, reasons: List[str]) -> None:
        if len(article.sources) < self.min_citations:
            reasons.append(f"At least {self.min_citations} citations are required.")

    def _fabricated_urls(self, sources: Iterable[Source], now: datetime) -> List[str]:
        return [
            source.url for source in sources
            if is_fabricated_url(source.url, now, self.fabricated_window_days)
        ]

    async def _count_reachable(self, sources: Sequence[Source], fabricated: Sequence[str]) -> int:
        checker = self.checker
        own_checker = None
        if checker is None:
            own_checker = ReachabilityChecker(timeout=self.reachability_timeout)
            checker = own_checker

        reachable = 0
        try:
            for source in sources[:self.max_reachability_checks]:
                if source.url in fabricated:
                    continue
                if await checker(source.url):
                    reachable += 1
                else:
                    logger.info(f"Source not reachable: {source.url}")
        finally:
            if own_checker is not None:
                await own_checker.close_session()
        return reachable

    def _check_structure(self, markdown: str, reasons: List[str]) -> None:
        headings = h2_headings(markdown)

        if self.required_sections:
            present = {heading.lower() for heading in headings}
            missing = [name for name in self.required_sections if name.lower() not in present]
            if missing:
                reasons.append(f"Missing required sections: {', '.join(missing)}.")
        elif len(headings) < self.min_h2_sections:
            reasons.append(
                f"At least {self.min_h2_sections} H2 sections are required (found {len(headings)})."
            )

        if not any(heading.startswith(REFERENCE_HEADINGS) for heading in headings):
            reasons.append("References section is required.")

    def _check_duplication(self, markdown: str, corpus: Iterable[str],
                           reasons: List[str], warnings: List[str]) -> None:
        highest = max_similarity(markdown, corpus)
        if highest >= self.max_similarity:
            reasons.append(
                f"Duplicate risk too high ({highest:.2f} >= {self.max_similarity:.2f})."
            )
        elif highest >= self.warn_similarity:
            warnings.append(
                f"Similar to an existing post ({highest:.2f} >= {self.warn_similarity:.2f})."
            )

    async def evaluate(self, article: Article, corpus: Iterable[str],
                       now: Optional[datetime] = None) -> QualityReport:
        """
        Run every check against a draft.

        Args:
            article: Drafted article
            corpus: Bodies of already published posts
            now: Reference time for the fabricated-URL heuristic

        Returns:
            QualityReport; ``passed`` is True only if no reasons were recorded
        """
        now = now or datetime.now(timezone.utc)
        reasons: List[str] = []
        warnings: List[str] = []

        payload = {key: value for key, value in article.to_dict().items() if value is not None}
        reasons.extend(validate_article_payload(payload))
        body = article.content_markdown if isinstance(article.content_markdown, str) else ''
        summary = article.summary if isinstance(article.summary, str) else ''

        self._check_citations(article, reasons)

        fabricated = self._fabricated_urls(article.sources, now)
        if fabricated:
            reasons.append(
                f"{len(fabricated)} source URL(s) appear to be fabricated "
                f"(contain today's date or suspicious patterns)."
            )

        if self.check_reachability:
            reachable = await self._count_reachable(article.sources, fabricated)
            if reachable < self.min_citations:
                reasons.append(
                    f"At least {self.min_citations} reachable source links are required "
                    f"(found {reachable})."
                )
        else:
            warnings.append("Source reachability was not checked.")

        self._check_structure(body, reasons)
        self._check_duplication(body, corpus, reasons, warnings)

        word_count = count_words(body)
        if word_count < self.min_word_count:
            reasons.append(f"Minimum word count not met ({word_count} < {self.min_word_count}).")

        if len(summary) > self.max_summary_length:
            warnings.append(
                f"Summary is longer than {self.max_summary_length} characters ({len(summary)})."
            )

        passed = not reasons
        report = QualityReport(
            passed=passed,
            score=compute_score(reasons, warnings),
            reasons=tuple(reasons),
            warnings=tuple(warnings),
            actions=(READY_ACTION,) if passed else (),
        )

        if passed:
            logger.info(f"Quality gate passed with score {report.score}")
        else:
            logger.error(f"Quality gate failed: {' | '.join(report.reasons)}")
        return report
