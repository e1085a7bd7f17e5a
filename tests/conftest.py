# File: tests/conftest.py
import logging
from typing import Dict, List, Union

import pytest

from site_rank.config import RunConfig
from site_rank.crawler.models import FetchError, FetchResult
from site_rank.graph import GraphStore
from site_rank.logger import LOGGER_NAME

A = "http://x.com/a"
B = "http://x.com/b"
C = "http://x.com/c"


class FakeFetcher:
    """
    Deterministic in-memory fetcher.

    ``pages`` maps a requested URL to a FetchResult or a FetchError cause string.
    Every requested URL is recorded in ``calls``.
    """

    def __init__(self, pages: Dict[str, Union[FetchResult, str]]) -> None:
        self.pages = pages
        self.calls: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        page = self.pages.get(url, "code 404")
        if isinstance(page, str):
            raise FetchError(url, page)
        return page


def html(url: str, *hrefs: str) -> FetchResult:
    return FetchResult(url, is_html=True, hrefs=list(hrefs))


@pytest.fixture(autouse=True)
def reset_logger():
    """
    CLI tests attach handlers to the project logger; restore plain propagation afterwards.
    """
    yield
    lg = logging.getLogger(LOGGER_NAME)
    lg.handlers.clear()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)


@pytest.fixture()
def basic_config() -> RunConfig:
    return RunConfig(same_host_only=True, max_visits=0)


@pytest.fixture()
def scenario_fetcher() -> FakeFetcher:
    """A links to B twice and C once; B has no links; C links back to A."""
    return FakeFetcher(
        {
            A: html(A, "/b", "/b#top", "/c"),
            B: html(B),
            C: html(C, "/a"),
        }
    )


@pytest.fixture()
def scenario_graph() -> GraphStore:
    graph = GraphStore()
    a, b, c = (graph.add_node(u) for u in (A, B, C))
    graph.add_edge(a, b, 2)
    graph.add_edge(a, c)
    graph.add_edge(c, a)
    return graph
