"""
Trend feed fetcher for autoblog.
"""
import asyncio
import logging
import re
from typing import Dict, List, Optional, Sequence

import aiohttp
from bs4 import BeautifulSoup

from autoblog.fetchers.sources import TREND_FEEDS, FeedSpec
from autoblog.utils.http import FEED_TIMEOUT, default_headers, fetch_text

# Configure logging
logger = logging.getLogger(__name__)

_CDATA_RE = re.compile(r'<!\[CDATA\[(.*?)\]\]>', re.DOTALL)
_HREF_RE = re.compile(r'<link\b[^>]*href=["\']([^"\']+)["\'][^>]*/?>', re.IGNORECASE)


def _block_re(tag: str):
    return re.compile(rf'<{tag}(?:\s[^>]*)?>(.*?)</{tag}>', re.IGNORECASE | re.DOTALL)


_ITEM_RE = _block_re('item')
_ENTRY_RE = _block_re('entry')


def sanitize(value: str) -> str:
    """
    Turn a raw feed field into plain text.

    Unwraps CDATA sections, strips markup and decodes entities.
    """
    text = _CDATA_RE.sub(r'\1', value or '')
    if '<' in text or '&' in text:
        text = BeautifulSoup(text, 'html.parser').get_text(' ')
    return ' '.join(text.split())


def _match_tag(block: str, tag: str) -> str:
    match = _block_re(tag).search(block)
    return sanitize(match.group(1)) if match else ''


def _match_href(block: str) -> str:
    match = _HREF_RE.search(block)
    return sanitize(match.group(1)) if match else ''


def parse_feed(xml: str, feed: FeedSpec) -> List[Dict[str, str]]:
    """
    Extract entries from an RSS or Atom document.

    Args:
        xml: Raw feed document
        feed: The feed the document came from

    Returns:
        List of entries with title, url, published_at, source and category
    """
    blocks = _ITEM_RE.findall(xml or '')
    if not blocks:
        blocks = _ENTRY_RE.findall(xml or '')

    entries = []
    for block in blocks:
        title = _match_tag(block, 'title')
        url = _match_tag(block, 'link') or _match_href(block)
        if not title or not url:
            continue
        published_at = (
            _match_tag(block, 'pubDate')
            or _match_tag(block, 'updated')
            or _match_tag(block, 'published')
        )
        entries.append({
            'title': title,
            'url': url,
            'published_at': published_at,
            'source': feed.source,
            'category': feed.category,
        })
    return entries


def read_feeds(feeds_file: str) -> List[FeedSpec]:
    """
    Read extra feeds from a text file.

    Each line is either a bare URL or ``category,source,url``; blank lines and
    lines starting with '#' are skipped.

    Args:
        feeds_file: Path to the feeds file

    Returns:
        Parsed feed specs (empty if the file does not exist)
    """
    feeds = []
    try:
        with open(feeds_file, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                parts = [part.strip() for part in line.split(',')]
                if len(parts) >= 3:
                    feeds.append(FeedSpec(parts[0], parts[1], ','.join(parts[2:])))
                else:
                    feeds.append(FeedSpec('software', parts[0], parts[0]))
    except FileNotFoundError:
        logger.error(f"Error: {feeds_file} not found")
    return feeds


class TrendFeedFetcher:
    """
    Fetches trend feeds concurrently and merges their entries.
    """
    def __init__(self, feeds: Optional[Sequence[FeedSpec]] = None, timeout: float = FEED_TIMEOUT,
                 max_concurrent: int = 8, user_agent: Optional[str] = None):
        """
        Initialize the TrendFeedFetcher.

        Args:
            feeds: Feeds to poll (defaults to TREND_FEEDS)
            timeout: Per-feed timeout in seconds
            max_concurrent: Maximum number of feeds fetched at once
            user_agent: User-Agent header value
        """
        self.feeds = tuple(feeds) if feeds is not None else TREND_FEEDS
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self.headers = default_headers(user_agent)

    @classmethod
    def from_config(cls, config) -> 'TrendFeedFetcher':
        """Build a fetcher for the default feeds plus any listed in ``feeds.file``."""
        feeds = list(TREND_FEEDS)
        feeds_file = config.get('feeds.file')
        if feeds_file:
            extra = read_feeds(feeds_file)
            logger.info(f"Loaded {len(extra)} extra feeds from {feeds_file}")
            feeds.extend(extra)
        return cls(
            feeds=feeds,
            timeout=float(config.get('feeds.timeout_seconds', FEED_TIMEOUT)),
            max_concurrent=int(config.get('feeds.max_concurrent', 8)),
            user_agent=config.get('feeds.user_agent'),
        )

    async def _fetch_feed(self, session, semaphore, feed: FeedSpec, max_per_feed: int) -> List[Dict[str, str]]:
        async with semaphore:
            xml = await fetch_text(session, feed.url, self.timeout)
        if not xml:
            return []
        return parse_feed(xml, feed)[:max_per_feed]

    async def fetch_entries(self, max_per_feed: int = 6, session: Optional[aiohttp.ClientSession] = None) -> List[Dict[str, str]]:
        """
        Fetch every feed and merge the results.

        All fetches settle before anything is merged; a feed that fails
        contributes nothing.

        Args:
            max_per_feed: Maximum entries kept per feed
            session: Existing session to reuse

        Returns:
            Entries in feed order
        """
        if not self.feeds:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)
        own_session = session is None
        if own_session:
            session = aiohttp.ClientSession(headers=self.headers)

        try:
            results = await asyncio.gather(
                *(self._fetch_feed(session, semaphore, feed, max_per_feed) for feed in self.feeds),
                return_exceptions=True,
            )
        finally:
            if own_session:
                await session.close()

        entries = []
        for feed, result in zip(self.feeds, results):
            if isinstance(result, BaseException):
                logger.warning(f"Feed {feed.source} failed: {result}")
                continue
            entries.extend(result)

        logger.info(f"Collected {len(entries)} trend entries from {len(self.feeds)} feeds")
        return entries
