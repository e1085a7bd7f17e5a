# File: tests/test_fetcher.py
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from site_rank.config import RunConfig
from site_rank.crawler.crawler import CrawlEngine
from site_rank.crawler.fetcher import HttpFetcher
from site_rank.crawler.models import FetchError


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def site(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()
    calls = {"flaky": 0}

    async def handle_a(_):
        return web.Response(
            text='<a href="/b">B</a><a href="/b">B</a><a href="/old-c">C</a><a href="/file.pdf">PDF</a>',
            content_type="text/html",
        )

    async def handle_b(_):
        return web.Response(text="<h1>B</h1>", content_type="text/html")

    async def handle_old_c(_):
        raise web.HTTPFound("/c")

    async def handle_c(_):
        return web.Response(text='<a href="/a">A</a><a href="/missing">gone</a>', content_type="text/html")

    async def handle_pdf(_):
        return web.Response(body=b"%PDF-1.4", content_type="application/pdf")

    async def handle_flaky(_):
        calls["flaky"] += 1
        if calls["flaky"] == 1:
            return web.Response(status=503)
        return web.Response(text="<h1>ok</h1>", content_type="text/html")

    app.router.add_get("/a", handle_a)
    app.router.add_get("/b", handle_b)
    app.router.add_get("/old-c", handle_old_c)
    app.router.add_get("/c", handle_c)
    app.router.add_get("/file.pdf", handle_pdf)
    app.router.add_get("/flaky", handle_flaky)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_fetch_html_page(site: str):
    async with HttpFetcher(RunConfig(timeout=2.0)) as fetcher:
        result = await fetcher.fetch(f"{site}/a")
    assert result.is_html
    assert result.final_url == f"{site}/a"
    assert list(result.hrefs) == ["/b", "/b", "/old-c", "/file.pdf"]


@pytest.mark.asyncio()
async def test_fetch_follows_redirect(site: str):
    async with HttpFetcher(RunConfig(timeout=2.0)) as fetcher:
        result = await fetcher.fetch(f"{site}/old-c")
    assert result.final_url == f"{site}/c"


@pytest.mark.asyncio()
async def test_fetch_non_html(site: str):
    async with HttpFetcher(RunConfig(timeout=2.0)) as fetcher:
        result = await fetcher.fetch(f"{site}/file.pdf")
    assert not result.is_html
    assert list(result.hrefs) == []


@pytest.mark.asyncio()
async def test_fetch_404_raises(site: str):
    async with HttpFetcher(RunConfig(timeout=2.0)) as fetcher:
        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch(f"{site}/missing")
    assert excinfo.value.url == f"{site}/missing"
    assert "404" in excinfo.value.cause


@pytest.mark.asyncio()
async def test_fetch_connection_refused(unused_tcp_port: int):
    async with HttpFetcher(RunConfig(timeout=2.0)) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch(f"http://localhost:{unused_tcp_port}/")


@pytest.mark.asyncio()
async def test_retry_on_server_error(site: str):
    async with HttpFetcher(RunConfig(timeout=5.0, retry_times=1)) as fetcher:
        result = await fetcher.fetch(f"{site}/flaky")
    assert result.is_html


@pytest.mark.asyncio()
async def test_crawl_over_http(site: str):
    async with HttpFetcher(RunConfig(timeout=2.0)) as fetcher:
        engine = CrawlEngine(fetcher, RunConfig())
        graph = await engine.run(f"{site}/a")

    assert graph.nodes == [f"{site}/a", f"{site}/b", f"{site}/c"]
    assert graph.weight(0, 1) == 2
    assert graph.weight(0, 2) == 1
    assert graph.weight(2, 0) == 1
    assert graph.out_degree == [3, 0, 1]
    assert graph.resolve(f"{site}/old-c") == 2
    assert [f.url for f in engine.failures] == [f"{site}/missing"]
