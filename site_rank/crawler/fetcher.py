# site_rank/crawler/fetcher.py
"""
Fetcher module: HTTP implementation of the page-fetch contract with retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_rank.config import RunConfig
from site_rank.crawler.link_extractor import extract_hrefs
from site_rank.crawler.models import FetchError, FetchResult
from site_rank.logger import LOGGER_NAME

_RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class _RetryableStatus(ClientError):
    pass


class HttpFetcher:
    """Fetches pages over HTTP, following redirects, and extracts their raw hrefs."""

    def __init__(
        self,
        config: RunConfig,
        session: Optional[ClientSession] = None,
        retry_status: Sequence[int] = _RETRY_STATUS,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._retry_status = retry_status
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch ``url`` and describe the page it resolved to.

        Raises FetchError on transport failures, timeouts and non-2xx/3xx statuses.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        attempts = 0
        while True:
            try:
                async with self.session.get(url, allow_redirects=True) as resp:
                    if resp.status in self._retry_status:
                        raise _RetryableStatus(f"code {resp.status}")
                    if resp.status < 200 or resp.status >= 400:
                        raise FetchError(url, f"code {resp.status}")
                    final_url = str(resp.url)
                    if resp.content_type != "text/html":
                        self.logger.debug("%s is not HTML page", final_url)
                        return FetchResult(final_url, is_html=False)
                    body = await resp.read()
                    return FetchResult(final_url, is_html=True, hrefs=extract_hrefs(body))
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(url, "timed out") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(url, str(exc) or type(exc).__name__) from exc
                backoff = min(2**attempts, 60)
                self.logger.debug("Retry %d/%d for %s after %d s", attempts, self.config.retry_times, url, backoff)
                await asyncio.sleep(backoff)
