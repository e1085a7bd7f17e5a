# File: tests/test_cli.py
"""CLI tests with click.testing.CliRunner: `crawl`, `rank`, `config`, `--version` and error handling."""
import json

import pytest
from click.testing import CliRunner

import site_rank.engine as engine_module
from conftest import A, B, C
from site_rank.cli import cli
from site_rank.crawler.crawler import CrawlEngine
from site_rank.persistence import load_graph, save_graph


@pytest.fixture(autouse=True)
def patch_crawl(monkeypatch, scenario_fetcher):
    """Replace the HTTP crawl with the in-memory scenario."""
    seen = {}

    async def fake_crawl(url, cfg, fetcher=None):
        seen["config"] = cfg
        return await CrawlEngine(scenario_fetcher, cfg).run(url)

    monkeypatch.setattr(engine_module, "crawl", fake_crawl)
    return seen


@pytest.fixture()
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _ranks(stdout: str):
    lines = stdout.strip().splitlines()
    pairs = [line.rsplit(" ", 1) for line in lines[:-1]]
    return [(url, float(rank)) for url, rank in pairs], float(lines[-1])


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteRank" in result.output


def test_show_config(isolated):
    cfg_file = isolated / "run.json"
    cfg_file.write_text(json.dumps({"max_visits": 7, "file_type": "txt"}), encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["max_visits"] == 7
    assert data["file_type"] == "txt"


def test_crawl_prints_ranking(isolated):
    result = CliRunner().invoke(cli, ["crawl", A])
    assert result.exit_code == 0, result.output
    pairs, total = _ranks(result.stdout)
    assert [url for url, _ in pairs] == [A, B, C]
    assert abs(total - 1.0) < 1e-9


def test_crawl_overrides(isolated, patch_crawl):
    result = CliRunner().invoke(cli, ["crawl", A, "--max-visits", "1", "--any-host", "--parallel"])
    assert result.exit_code == 0, result.output
    cfg = patch_crawl["config"]
    assert (cfg.max_visits, cfg.same_host_only, cfg.parallel) == (1, False, True)
    pairs, total = _ranks(result.stdout)
    assert pairs == [(A, 1.0)]


def test_crawl_saves_then_rank(isolated):
    out = isolated / "graph.txt"
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", A, "--output", str(out), "--format", "txt"])
    assert result.exit_code == 0, result.output
    assert load_graph(out, "txt").out_degree == [3, 0, 1]

    report = isolated / "report.json"
    result = runner.invoke(cli, ["rank", str(out), "--format", "txt", "--json", str(report)])
    assert result.exit_code == 0, result.output
    pairs, total = _ranks(result.stdout)
    assert [url for url, _ in pairs] == ["0", "1", "2"]
    data = json.loads(report.read_text(encoding="utf-8"))
    assert [entry["index"] for entry in data["ranks"]] == [0, 1, 2]
    assert abs(data["sum"] - 1.0) < 1e-9
    assert data["converged"] is True


def test_rank_snapshot_keeps_urls(isolated, scenario_graph):
    path = save_graph(scenario_graph, isolated / "graph.bin", "bin")
    result = CliRunner().invoke(cli, ["rank", str(path)])
    assert result.exit_code == 0, result.output
    pairs, _ = _ranks(result.stdout)
    assert [url for url, _ in pairs] == [A, B, C]


def test_rank_rejects_corrupt_file(isolated):
    bad = isolated / "graph.bin"
    bad.write_bytes(b"garbage")
    result = CliRunner().invoke(cli, ["rank", str(bad)])
    assert result.exit_code == 1
    assert "Failed to load graph" in result.output


def test_rank_empty_graph(isolated):
    empty = isolated / "empty.txt"
    empty.write_text("0\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["rank", str(empty), "--format", "txt"])
    assert result.exit_code == 1
    assert "Nothing to rank" in result.output


def test_bad_config_file(isolated):
    cfg_file = isolated / "run.yaml"
    cfg_file.write_text("damping: 3", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Failed to load configuration" in result.output
