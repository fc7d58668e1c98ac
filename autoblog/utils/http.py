"""
HTTP utilities for autoblog.
"""
import asyncio
import logging
from typing import Dict, Optional

import aiohttp
import async_timeout

# Configure logging
logger = logging.getLogger(__name__)

FEED_TIMEOUT = 12  # seconds
REACHABILITY_TIMEOUT = 10  # seconds
DEFAULT_USER_AGENT = 'autoblog/0.1 (+https://example.dev)'


def default_headers(user_agent: Optional[str] = None) -> Dict[str, str]:
    return {
        'User-Agent': user_agent or DEFAULT_USER_AGENT,
        'Accept': 'application/rss+xml, application/atom+xml, application/json, text/html;q=0.9, */*;q=0.8',
    }


async def fetch_text(session: aiohttp.ClientSession, url: str, timeout: float = FEED_TIMEOUT) -> Optional[str]:
    """
    Fetch a URL as text.

    A timeout, network error or non-2xx status is treated as "no data".

    Args:
        session: Open aiohttp session
        url: The URL to fetch
        timeout: Seconds before the request is cancelled

    Returns:
        Response body, or None if the fetch failed
    """
    try:
        async with async_timeout.timeout(timeout):
            async with session.get(url) as response:
                response.raise_for_status()
                return await response.text()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning(f"Error fetching {url}: {e}")
        return None


async def fetch_json(session: aiohttp.ClientSession, url: str, timeout: float = FEED_TIMEOUT):
    """
    Fetch and decode a JSON document, or return None on any failure.
    """
    try:
        async with async_timeout.timeout(timeout):
            async with session.get(url) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.warning(f"Error fetching {url}: {e}")
        return None


class ReachabilityChecker:
    """
    Checks that cited URLs actually resolve.
    """
    def __init__(self, timeout: float = REACHABILITY_TIMEOUT, user_agent: Optional[str] = None):
        self.timeout = timeout
        self.headers = default_headers(user_agent)
        self._session = None

    @property
    def session(self):
        """
        Lazy initialization of aiohttp session.

        Returns:
            aiohttp.ClientSession: The HTTP session
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.headers)
        return self._session

    async def close_session(self):
        """Close aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __call__(self, url: str) -> bool:
        """
        Probe a URL with HEAD, falling back to GET when HEAD is refused.

        Both requests share one timeout budget.

        Args:
            url: The URL to probe

        Returns:
            True if either request ends in a status below 400
        """
        if not url or not isinstance(url, str):
            return False

        try:
            async with async_timeout.timeout(self.timeout):
                async with self.session.head(url, allow_redirects=True) as response:
                    if response.status < 400:
                        return True
                async with self.session.get(url, allow_redirects=True) as response:
                    return response.status < 400
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Unreachable source {url}: {e}")
            return False
