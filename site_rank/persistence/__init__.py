"""site_rank.persistence: saving and loading a GraphStore as a binary snapshot or a text edge list."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from site_rank.graph import GraphStore
from site_rank.logger import logger
from site_rank.persistence.edge_list import read_edge_list, write_edge_list
from site_rank.persistence.errors import GraphFormatError
from site_rank.persistence.snapshot import read_snapshot, write_snapshot

__all__ = [
    "GraphFormatError",
    "load_graph",
    "read_edge_list",
    "read_snapshot",
    "save_graph",
    "write_edge_list",
    "write_snapshot",
]


def save_graph(graph: GraphStore, path: Union[str, Path], file_type: str = "bin") -> Path:
    """Write ``graph`` to ``path`` in the selected format and return the path."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Saving graph (%d nodes) to %s as %s", graph.node_count, p, file_type)
    if file_type == "bin":
        with p.open("wb") as f:
            write_snapshot(graph, f)
    elif file_type == "txt":
        with p.open("w", encoding="utf-8", newline="\n") as f:
            write_edge_list(graph, f)
    else:
        raise ValueError(f"Unsupported file type: {file_type}")
    return p


def load_graph(path: Union[str, Path], file_type: str = "bin") -> GraphStore:
    """Read a graph written by :func:`save_graph`. Malformed input raises GraphFormatError."""
    p = Path(path)
    logger.info("Parsing file %s as %s", p, file_type)
    if file_type == "bin":
        with p.open("rb") as f:
            graph = read_snapshot(f)
    elif file_type == "txt":
        with p.open("r", encoding="utf-8") as f:
            graph = read_edge_list(f)
    else:
        raise ValueError(f"Unsupported file type: {file_type}")
    logger.info("Loaded %d nodes, %d links", graph.node_count, graph.edge_count)
    return graph
