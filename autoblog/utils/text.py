"""
Text helpers shared by scoring, drafting and the quality gate.
"""
import re
from typing import FrozenSet, Iterable

_PUNCTUATION_RE = re.compile(r'[^\w\s]|_', re.UNICODE)
_CODE_FENCE_RE = re.compile(r'```.*?```', re.DOTALL)
_INLINE_CODE_RE = re.compile(r'`[^`]*`')
_NON_WORD_RE = re.compile(r'[\W_]+', re.UNICODE)


def tokenize(text: str) -> FrozenSet[str]:
    """
    Split text into a set of lowercased, punctuation-free tokens.

    Args:
        text: Text to tokenize

    Returns:
        Set of non-empty tokens
    """
    cleaned = _PUNCTUATION_RE.sub(' ', (text or '').lower())
    return frozenset(token for token in cleaned.split() if token)


def jaccard(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    """Jaccard coefficient of two token sets. Two empty sets are identical."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def similarity(a: str, b: str) -> float:
    """
    Compute textual overlap between two strings.

    Jaccard coefficient over token sets: symmetric, 1.0 for identical text,
    linear in the number of tokens.

    Args:
        a: First text
        b: Second text

    Returns:
        Similarity in [0, 1]
    """
    return jaccard(tokenize(a), tokenize(b))


def max_similarity(text: str, others: Iterable[str]) -> float:
    """
    Highest similarity between ``text`` and any of ``others`` (0.0 if none).
    """
    tokens = tokenize(text)
    highest = 0.0
    for other in others:
        highest = max(highest, jaccard(tokens, tokenize(other)))
    return highest


def count_words(markdown: str) -> int:
    """
    Count prose words in a Markdown body.

    Code fences and inline code are dropped, and anything that is not a letter
    or digit acts as a separator.
    """
    text = _CODE_FENCE_RE.sub(' ', markdown or '')
    text = _INLINE_CODE_RE.sub(' ', text)
    text = _NON_WORD_RE.sub(' ', text)
    return len(text.split())


def strip_code_fences(markdown: str) -> str:
    return _CODE_FENCE_RE.sub('', markdown or '')


def slugify(title: str, max_length: int = 80) -> str:
    """
    Derive a URL slug from a title.

    Args:
        title: Post title
        max_length: Maximum slug length

    Returns:
        Lowercase, hyphen-separated slug ("post" if nothing usable remains)
    """
    slug = _NON_WORD_RE.sub('-', (title or '').lower()).strip('-')
    if len(slug) > max_length:
        slug = slug[:max_length].rstrip('-')
    return slug or 'post'


def normalize_title(title: str) -> str:
    """Case- and whitespace-insensitive key for comparing titles."""
    return ' '.join((title or '').lower().split())
