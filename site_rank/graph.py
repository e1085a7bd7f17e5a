# File: site_rank/graph.py
"""site_rank.graph: in-memory link graph shared by the crawler, the ranker and persistence.

Nodes are identified by their integer index (discovery order). The adjacency is
sparse: ``adjacency[src][dst]`` is the number of times ``src`` links to ``dst``.
``out_degree[src]`` always equals the sum of ``adjacency[src]``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

__all__ = ["GraphStore"]


@dataclass
class GraphStore:
    nodes: List[str] = field(default_factory=list)
    out_degree: List[int] = field(default_factory=list)
    adjacency: Dict[int, Dict[int, int]] = field(default_factory=dict)
    aliases: Dict[str, int] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        """Total link occurrences, counting multiplicity."""
        return sum(self.out_degree)

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, url: str) -> int:
        """Append a new node for ``url`` and return its index."""
        if url in self.aliases:
            raise ValueError(f"Node already registered: {url}")
        index = len(self.nodes)
        self.nodes.append(url)
        self.out_degree.append(0)
        self.aliases[url] = index
        return index

    def add_alias(self, alias: str, index: int) -> None:
        self._check_index(index)
        self.aliases[alias] = index

    def resolve(self, url: str) -> Optional[int]:
        """Index of the node known under ``url``, if any."""
        return self.aliases.get(url)

    def add_edge(self, src: int, dst: int, count: int = 1) -> None:
        """Record ``count`` link occurrences from ``src`` to ``dst``."""
        self._check_index(src)
        self._check_index(dst)
        if count < 1:
            raise ValueError(f"Edge multiplicity must be positive, got {count}")
        row = self.adjacency.setdefault(src, {})
        row[dst] = row.get(dst, 0) + count
        self.out_degree[src] += count

    def weight(self, src: int, dst: int) -> int:
        return self.adjacency.get(src, {}).get(dst, 0)

    def edges(self) -> Iterator[Tuple[int, int, int]]:
        """Yield ``(src, dst, count)`` in source-major, destination-ascending order."""
        for src in sorted(self.adjacency):
            row = self.adjacency[src]
            for dst in sorted(row):
                yield src, dst, row[dst]

    def in_edges(self) -> List[List[Tuple[int, int]]]:
        """For every destination, the list of ``(src, count)`` pointing at it."""
        incoming: List[List[Tuple[int, int]]] = [[] for _ in self.nodes]
        for src, dst, count in self.edges():
            incoming[dst].append((src, count))
        return incoming

    def dangling_nodes(self) -> List[int]:
        return [i for i, degree in enumerate(self.out_degree) if degree == 0]

    def validate(self) -> None:
        """Raise ValueError when the structure breaks one of its invariants."""
        n = len(self.nodes)
        if len(self.out_degree) != n:
            raise ValueError(f"out_degree has {len(self.out_degree)} entries for {n} nodes")
        if len(set(self.nodes)) != n:
            raise ValueError("Duplicate node URLs")
        sums = [0] * n
        for src, row in self.adjacency.items():
            if not 0 <= src < n:
                raise ValueError(f"Edge source {src} out of range")
            for dst, count in row.items():
                if not 0 <= dst < n:
                    raise ValueError(f"Edge destination {dst} out of range")
                if count < 1:
                    raise ValueError(f"Non-positive multiplicity on edge {src}->{dst}")
                sums[src] += count
        if sums != list(self.out_degree):
            raise ValueError("out_degree does not match adjacency weights")
        for alias, index in self.aliases.items():
            if not 0 <= index < n:
                raise ValueError(f"Alias {alias!r} points to missing node {index}")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.nodes):
            raise IndexError(f"Node index {index} out of range (0..{len(self.nodes) - 1})")
