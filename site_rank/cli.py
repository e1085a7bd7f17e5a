# === FILE: site_rank/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for SiteRank.

Commands:
  crawl URL   Crawl from URL, then save the graph (--output) or print its PageRank
  rank FILE   Load a saved graph and print its PageRank
  config      Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only if omitted)

Example:
  site_rank crawl https://example.com --max-visits 100 --output graph.bin
  site_rank rank graph.bin --parallel
"""
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_rank import __version__
from site_rank.config import RunConfig
from site_rank.engine import Engine
from site_rank.logger import init_logging
from site_rank.pagerank import EmptyGraphError, Ranking
from site_rank.persistence import GraphFormatError
from site_rank.report import render_json, render_text

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])
_DEFAULT_CONFIG = Path("configs/default.yaml")


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _emit_ranking(ranking: Ranking, json_output) -> None:
    click.echo(render_text(ranking))
    if json_output:
        try:
            saved = render_json(ranking, json_output)
            click.echo(f"JSON report: {saved}", err=True)
        except OSError as e:
            print_error(f"Failed to save JSON report: {e}")


def _solve(engine: Engine, graph) -> Ranking:
    try:
        return engine.rank(graph)
    except EmptyGraphError as e:
        print_error(f"Nothing to rank: {e}")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="SiteRank, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML/JSON configuration file.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Log file path (stderr if omitted)",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file):
    """SiteRank: crawl a site and rank its pages with PageRank."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        if config_path is not None or _DEFAULT_CONFIG.exists():
            cfg = Engine.load_config(config_path)
        else:
            cfg = RunConfig()
    except (OSError, ValueError, TypeError) as e:
        print_error(f"Failed to load configuration: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


def _override(ctx, **overrides) -> RunConfig:
    try:
        return ctx.obj["config"].with_overrides(**overrides)
    except ValidationError as e:
        print_error(f"Invalid option: {e}")


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.argument("url")
@click.option("--output", "-o", "output", default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help="Save the crawled graph here instead of ranking it")
@click.option("--format", "-f", "file_type", default=None, type=click.Choice(["bin", "txt"]),
              help="Persistence format (overrides file_type)")
@click.option("--max-visits", "-l", "max_visits", type=int, default=None,
              help="Maximum distinct pages to visit (0 = unbounded)")
@click.option("--any-host", is_flag=True, help="Follow links to other hosts too")
@click.option("--parallel", is_flag=True, help="Compute PageRank on a thread pool")
@click.option("--json", "-j", "json_output", default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help="Also save the ranking as a JSON report")
@click.pass_context
def crawl_cmd(ctx, url, output, file_type, max_visits, any_host, parallel, json_output):
    """Crawl from URL, then save the graph or print the PageRank of every page."""
    cfg = _override(
        ctx,
        file_type=file_type,
        max_visits=max_visits,
        same_host_only=False if any_host else None,
        parallel=True if parallel else None,
    )
    engine = Engine(cfg)
    try:
        graph = engine.start_crawl(url)
    except Exception as e:
        print_error(f"Crawl failed: {e}")

    if output is not None:
        click.echo("Saving to a file...", err=True)
        try:
            saved = engine.save(graph, output)
        except OSError as e:
            print_error(f"Failed to save graph: {e}")
        click.echo(f"Graph saved: {saved} ({graph.node_count} nodes)", err=True)
        return

    _emit_ranking(_solve(engine, graph), json_output)


@cli.command("rank", context_settings=CONTEXT_SETTINGS)
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "-f", "file_type", default=None, type=click.Choice(["bin", "txt"]),
              help="Format of the saved graph (overrides file_type)")
@click.option("--parallel", is_flag=True, help="Compute PageRank on a thread pool")
@click.option("--json", "-j", "json_output", default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path),
              help="Also save the ranking as a JSON report")
@click.pass_context
def rank_cmd(ctx, input_path, file_type, parallel, json_output):
    """Load a saved graph and print the PageRank of every node."""
    engine = Engine(_override(ctx, file_type=file_type, parallel=True if parallel else None))
    try:
        graph = engine.load(input_path)
    except (GraphFormatError, OSError) as e:
        print_error(f"Failed to load graph: {e}")

    _emit_ranking(_solve(engine, graph), json_output)


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the current configuration as JSON."""
    cfg = ctx.obj["config"]
    click.echo(json.dumps(cfg.model_dump(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
