"""
HTTP document fetcher for public market pages and feeds.

Upstream sites serve degraded or blocked content to clients that do not
look like a browser, so every request carries a browser-like header set.
A fetch is a single GET; callers may allow a bounded number of attempts.
"""

import aiohttp
import asyncio
from typing import Dict, Optional
from loguru import logger

from yieldwatch.config import get_settings
from .interfaces import TransportError, ProviderTimeoutError


def browser_headers(user_agent: Optional[str] = None, accept: Optional[str] = None) -> Dict[str, str]:
    """Default header set sent with every fetch."""
    settings = get_settings()
    return {
        "User-Agent": user_agent or settings.USER_AGENT,
        "Accept": accept or "text/html,application/xhtml+xml,text/csv,application/json;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": "https://www.google.com/",
    }


class HttpDocumentFetcher:
    """
    aiohttp-backed DocumentFetcher.

    One attempt is bounded by ``timeout`` seconds; on timeout the request
    is aborted by aiohttp and the connection released.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff: Optional[float] = None,
    ):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.FETCH_MAX_ATTEMPTS)
        self.backoff = backoff if backoff is not None else settings.FETCH_RETRY_BACKOFF_SECONDS
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """
        Fetch ``url`` and return the body as text.

        Retries transport failures up to ``max_attempts`` times. A 4xx
        answer is final: the page will not appear on a second try.

        Raises:
            TransportError: non-2xx status or connection failure
            ProviderTimeoutError: every attempt timed out
        """
        request_headers = {**browser_headers(), **(headers or {})}
        last_error: Optional[TransportError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._fetch_once(url, request_headers)
            except TransportError as e:
                last_error = e
                if e.status is not None and 400 <= e.status < 500:
                    break
                if attempt < self.max_attempts:
                    logger.debug(f"Fetcher: attempt {attempt} for {url} failed ({e}), retrying")
                    await asyncio.sleep(self.backoff * attempt)

        raise last_error

    async def _fetch_once(self, url: str, headers: Dict[str, str]) -> str:
        session = await self._get_session()

        try:
            async with session.get(url, headers=headers, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(
                        f"HTTP {response.status} for {url}",
                        status=response.status,
                        url=url,
                    )
                return await response.text(errors="replace")

        except asyncio.TimeoutError:
            raise ProviderTimeoutError(f"Request timed out after {self.timeout}s: {url}", url=url)
        except aiohttp.ClientError as e:
            raise TransportError(f"Connection error for {url}: {str(e)}", url=url)


# Singleton instance
_fetcher: Optional[HttpDocumentFetcher] = None


def get_document_fetcher() -> HttpDocumentFetcher:
    """Get singleton document fetcher instance."""
    global _fetcher
    if _fetcher is None:
        _fetcher = HttpDocumentFetcher()
    return _fetcher
