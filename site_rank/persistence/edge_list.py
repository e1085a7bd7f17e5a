# site_rank/persistence/edge_list.py
"""
Plain-text edge list: first line is the node count, then one ``src<TAB>dst``
line per link occurrence. Multiplicity is expressed by repeating the line.
"""
from __future__ import annotations

from typing import Iterable, TextIO

from site_rank.graph import GraphStore
from site_rank.persistence.errors import GraphFormatError


def write_edge_list(graph: GraphStore, f: TextIO) -> None:
    f.write(f"{graph.node_count}\n")
    for src, dst, count in graph.edges():
        line = f"{src}\t{dst}\n"
        for _ in range(count):
            f.write(line)


def _is_decimal(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _parse_index(token: str, line_no: int) -> int:
    if not _is_decimal(token):
        raise GraphFormatError(f"Line {line_no}: {token!r} is not a node index")
    return int(token)


def read_edge_list(f: Iterable[str]) -> GraphStore:
    """
    Rebuild a graph from an edge list.

    Node labels are the decimal index tokens; out-degrees are recounted from
    the edges, and no aliases besides the labels are restored.
    """
    lines = iter(f)
    try:
        header = next(lines, "").strip()
        if not header:
            raise GraphFormatError("Missing node count header")
        if not _is_decimal(header):
            raise GraphFormatError(f"Invalid node count {header!r}")
        size = int(header)

        graph = GraphStore()
        for i in range(size):
            graph.add_node(str(i))

        for line_no, line in enumerate(lines, start=2):
            fields = line.split()
            if not fields:
                continue
            if len(fields) != 2:
                raise GraphFormatError(f"Line {line_no}: expected 2 tokens, got {len(fields)}")
            src = _parse_index(fields[0], line_no)
            dst = _parse_index(fields[1], line_no)
            if not (0 <= src < size and 0 <= dst < size):
                raise GraphFormatError(f"Line {line_no}: index out of range for {size} nodes")
            graph.add_edge(src, dst)
    except UnicodeDecodeError as exc:
        raise GraphFormatError(f"Edge list is not valid UTF-8 text: {exc}") from exc
    return graph
