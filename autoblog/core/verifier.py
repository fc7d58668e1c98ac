"""
Source verification for generated research.

Generation services fabricate URLs, so anything they return is reconciled
against the sources the research stage derived itself. Unverifiable data never
leaves this module.
"""
import logging
from typing import Any, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from autoblog.core.models import CONFIDENCE_LEVELS, Claim, Source, with_title

# Configure logging
logger = logging.getLogger(__name__)

MAX_SOURCES = 6
MIN_SOURCES = 2


def is_http_url(url: Any) -> bool:
    """True if ``url`` parses as an absolute http(s) URL with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def _as_list(value: Any) -> List[Any]:
    """Items of a list or tuple payload field; any other shape counts as empty."""
    return list(value) if isinstance(value, (list, tuple)) else []


def _coerce_source(raw: Any) -> Optional[Source]:
    if isinstance(raw, Source):
        return raw
    if isinstance(raw, dict):
        return Source(
            title=str(raw.get('title') or '').strip(),
            url=str(raw.get('url') or '').strip(),
            published_at=raw.get('published_at'),
        )
    return None


def verify_sources(candidate_sources: Iterable[Any], trusted_sources: Sequence[Source],
                   allow_augment: bool = False, max_sources: int = MAX_SOURCES,
                   min_sources: int = MIN_SOURCES) -> List[Source]:
    """
    Reconcile a claimed source list against the trusted one.

    Args:
        candidate_sources: Sources claimed by a generation service (Source or dict)
        trusted_sources: Sources the research stage derived itself
        allow_augment: Accept unknown but well-formed http(s) URLs as new entries
        max_sources: Cap on the verified list when augmenting
        min_sources: Minimum number of well-formed candidates to consider the list at all

    Returns:
        Verified sources, or ``trusted_sources`` unchanged when the candidate
        list is unusable
    """
    trusted = list(trusted_sources)
    trusted_by_url = {source.url: source for source in trusted}

    valid = []
    for raw in _as_list(candidate_sources):
        source = _coerce_source(raw)
        if source is not None and is_http_url(source.url):
            valid.append(source)

    if len(valid) < min_sources:
        logger.warning(
            f"Only {len(valid)} well-formed candidate sources (need {min_sources}), "
            f"falling back to {len(trusted)} trusted sources"
        )
        return trusted

    verified: List[Source] = []
    seen = set()
    for source in valid:
        if source.url in seen:
            continue
        match = trusted_by_url.get(source.url)
        if match is not None:
            verified.append(with_title(match, source.title))
            seen.add(source.url)
        elif allow_augment and len(verified) < max_sources:
            verified.append(source)
            seen.add(source.url)
        else:
            logger.warning(f"Rejected unverified source URL: {source.url}")

    if not verified:
        logger.warning("No candidate source survived verification, using trusted sources")
        return trusted

    return verified


def _normalize_confidence(value: Any) -> str:
    level = str(value or '').strip().lower()
    return level if level in CONFIDENCE_LEVELS else 'medium'


def normalize_claims(raw_claims: Iterable[Any], source_list: Sequence[Source]) -> List[Claim]:
    """
    Attach every claim to a verified source.

    The cited source is resolved by URL, then by title. A claim whose citation
    cannot be resolved is assigned ``source_list[index % len(source_list)]``
    instead of being dropped.

    Args:
        raw_claims: Claim objects or dicts with 'claim'/'text', 'source_url',
            'source_title' and 'confidence'
        source_list: Verified sources of the bundle

    Returns:
        Claims that all cite a member of ``source_list``
    """
    if not source_list:
        return []

    by_url = {source.url: source for source in source_list}
    by_title = {source.title.strip().lower(): source for source in source_list if source.title}

    claims: List[Claim] = []
    for index, raw in enumerate(_as_list(raw_claims)):
        if isinstance(raw, Claim):
            raw = raw.to_dict()
        if isinstance(raw, str):
            raw = {'claim': raw}
        if not isinstance(raw, dict):
            continue

        text = str(raw.get('claim') or raw.get('text') or '').strip()
        if not text:
            continue

        url = str(raw.get('source_url') or '').strip()
        title = str(raw.get('source_title') or '').strip().lower()
        source = by_url.get(url) or by_title.get(title)
        if source is None:
            source = source_list[index % len(source_list)]

        claims.append(Claim(
            text=text,
            source_url=source.url,
            source_title=source.title,
            confidence=_normalize_confidence(raw.get('confidence')),
        ))

    return claims

