# site_rank/crawler/models.py
"""
Data models for the SiteRank crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Sequence


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Outcome of a successful fetch: final URL after redirects and raw hrefs found."""

    final_url: str
    is_html: bool = True
    hrefs: Sequence[str] = ()


class FetchError(Exception):
    """A page could not be fetched. Carries the requested URL and a readable cause."""

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f'Failed to crawl "{url}": {cause}')
        self.url = url
        self.cause = cause


class PageFetcher(Protocol):
    """Anything able to fetch a page for the crawl engine."""

    async def fetch(self, url: str) -> FetchResult:
        ...


@dataclass(slots=True)
class Visit:
    """One distinct canonical page, recorded the first time it is fetched as HTML."""

    raw_url: str
    canonical_url: str
    outbound_links: List[str] = field(default_factory=list)
    node_index: int = -1


@dataclass(slots=True, frozen=True)
class Job:
    """A pending link: found on ``referer`` (node ``referer_index``) pointing at ``raw_url``."""

    referer: str
    referer_index: int
    raw_url: str
