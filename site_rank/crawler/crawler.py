from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from site_rank.config import RunConfig
from site_rank.crawler.link_extractor import canonicalize_link
from site_rank.crawler.models import FetchError, FetchResult, Job, PageFetcher, Visit
from site_rank.graph import GraphStore
from site_rank.logger import LOGGER_NAME

__all__ = ("CrawlEngine", "CrawlFailure")


@dataclass(slots=True, frozen=True)
class CrawlFailure:
    """A dropped job: the URL that failed, the page linking to it and why."""
    url: str
    referer: str
    cause: str


class CrawlEngine:
    """
    Breadth-first crawler building a GraphStore from a seed page.

    Jobs are drained one at a time; fetches are awaited sequentially so node
    indices follow discovery order.
    """

    def __init__(self, fetcher: PageFetcher, config: Optional[RunConfig] = None) -> None:
        self.fetcher = fetcher
        self.config = config or RunConfig()
        self.logger = logging.getLogger(LOGGER_NAME)
        self._reset()

    def _reset(self) -> None:
        self.graph = GraphStore()
        self.visits: List[Visit] = []
        self.failures: List[CrawlFailure] = []
        self._queue: Deque[Job] = deque()

    async def run(self, seed_url: str) -> GraphStore:
        """Crawl from ``seed_url`` until the worklist is empty and return the graph."""
        self._reset()
        self.logger.info("Crawl started: %s", seed_url)
        start = time.monotonic()

        try:
            entry = await self._visit(seed_url)
        except FetchError as exc:
            self.logger.warning("%s", exc)
            self.failures.append(CrawlFailure(seed_url, "", exc.cause))
            return self.graph
        if entry is None:
            return self.graph
        self._record(entry)

        while self._queue:
            job = self._queue.popleft()

            known = self.graph.resolve(job.raw_url)
            if known is not None:
                self.graph.add_edge(job.referer_index, known)
                continue

            if self._cap_reached():
                continue

            try:
                visit = await self._visit(job.raw_url)
            except FetchError as exc:
                self.logger.warning("%s (Referer: %s)", exc, job.referer)
                self.failures.append(CrawlFailure(job.raw_url, job.referer, exc.cause))
                continue
            if visit is None:
                continue

            index = self.graph.resolve(visit.canonical_url)
            if index is None:
                index = self._record(visit)
            else:
                # redirect landed on a page already known under another alias
                self.graph.add_alias(visit.raw_url, index)

            self.graph.add_edge(job.referer_index, index)

        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d pages, %d links in %.2f s",
            self.graph.node_count, self.graph.edge_count, duration,
        )
        return self.graph

    async def _visit(self, raw_url: str) -> Optional[Visit]:
        result: FetchResult = await self.fetcher.fetch(raw_url)
        if not result.is_html:
            self.logger.debug("%s is not HTML page", result.final_url)
            return None
        links: List[str] = []
        for href in result.hrefs:
            link = canonicalize_link(href, result.final_url, self.config.same_host_only)
            if link is not None:
                links.append(link)
        return Visit(raw_url=raw_url, canonical_url=result.final_url, outbound_links=links)

    def _record(self, visit: Visit) -> int:
        visit.node_index = self.graph.add_node(visit.canonical_url)
        if visit.raw_url != visit.canonical_url:
            self.graph.add_alias(visit.raw_url, visit.node_index)
        self.visits.append(visit)
        self.logger.info("%d - New link: %s", self.graph.node_count, visit.canonical_url)
        for link in visit.outbound_links:
            self._queue.append(Job(visit.canonical_url, visit.node_index, link))
        return visit.node_index

    def _cap_reached(self) -> bool:
        cap = self.config.max_visits
        return cap > 0 and self.graph.node_count >= cap
