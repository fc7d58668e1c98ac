"""
Hacker News top stories fetcher for autoblog.
"""
import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp

from autoblog.utils.http import FEED_TIMEOUT, default_headers, fetch_json

# Configure logging
logger = logging.getLogger(__name__)

HN_API = 'https://hacker-news.firebaseio.com/v0'


class HackerNewsFetcher:
    """
    Fetches titles of the current Hacker News top stories.
    """
    def __init__(self, base_url: str = HN_API, timeout: float = FEED_TIMEOUT, user_agent: Optional[str] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = default_headers(user_agent)

    async def _fetch_item(self, session, item_id) -> Optional[Dict[str, str]]:
        item = await fetch_json(session, f"{self.base_url}/item/{item_id}.json", self.timeout)
        if not isinstance(item, dict):
            return None
        title = item.get('title')
        if not title or not isinstance(title, str):
            return None
        url = item.get('url') or f"https://news.ycombinator.com/item?id={item_id}"
        return {'title': title.strip(), 'url': url, 'published_at': item.get('time')}

    async def fetch_stories(self, limit: int = 12, session: Optional[aiohttp.ClientSession] = None) -> List[Dict[str, str]]:
        """
        Fetch the top stories.

        Args:
            limit: Number of top story ids to resolve
            session: Existing session to reuse

        Returns:
            Stories with title, url and published_at (epoch seconds); empty
            if Hacker News is unreachable
        """
        own_session = session is None
        if own_session:
            session = aiohttp.ClientSession(headers=self.headers)

        try:
            ids = await fetch_json(session, f"{self.base_url}/topstories.json", self.timeout)
            if not isinstance(ids, list):
                return []

            results = await asyncio.gather(
                *(self._fetch_item(session, item_id) for item_id in ids[:limit]),
                return_exceptions=True,
            )
        finally:
            if own_session:
                await session.close()

        stories = [r for r in results if isinstance(r, dict)]
        logger.info(f"Collected {len(stories)} Hacker News stories")
        return stories
