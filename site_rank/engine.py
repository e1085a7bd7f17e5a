# File: site_rank/engine.py
"""site_rank.engine: orchestration layer running a crawl, persisting the graph and ranking it."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from site_rank.config import RunConfig, load_config
from site_rank.crawler.crawler import CrawlEngine
from site_rank.crawler.fetcher import HttpFetcher
from site_rank.crawler.models import PageFetcher
from site_rank.graph import GraphStore
from site_rank.logger import logger
from site_rank.pagerank import PageRankSolver, Ranking
from site_rank.persistence import load_graph, save_graph

__all__ = ["Engine", "crawl"]


async def crawl(seed_url: str, config: RunConfig, fetcher: Optional[PageFetcher] = None) -> GraphStore:
    """Crawl from ``seed_url``; uses an HttpFetcher unless another fetcher is given."""
    if fetcher is not None:
        return await CrawlEngine(fetcher, config).run(seed_url)
    async with HttpFetcher(config) as http:
        return await CrawlEngine(http, config).run(seed_url)


class Engine:
    """Facade for the CLI and tests: crawl, save, load and rank with one configuration."""

    @staticmethod
    def load_config(path: Union[str, Path, None]) -> RunConfig:
        """Load a YAML/JSON config file (``configs/default.yaml`` when None)."""
        return load_config(path)

    def __init__(self, config: RunConfig) -> None:
        self.config = config

    def start_crawl(self, seed_url: str, fetcher: Optional[PageFetcher] = None) -> GraphStore:
        """Run the crawl to completion on a fresh event loop."""
        try:
            return asyncio.run(crawl(seed_url, self.config, fetcher))
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise

    def rank(self, graph: GraphStore) -> Ranking:
        return PageRankSolver.from_config(self.config).solve(graph)

    def save(self, graph: GraphStore, path: Union[str, Path]) -> Path:
        return save_graph(graph, path, self.config.file_type)

    def load(self, path: Union[str, Path]) -> GraphStore:
        return load_graph(path, self.config.file_type)
