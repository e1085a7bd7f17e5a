# File: site_rank/pagerank.py
"""site_rank.pagerank: power-iteration PageRank over a GraphStore.

Each iteration computes, for every node ``i``::

    inflow(i)    = sum_j rank(j) * weight(j -> i) / out_degree(j)
    dangling     = sum of rank(j) over nodes with out_degree(j) == 0
    new_rank(i)  = d * (inflow(i) + dangling / N) + (1 - d) / N

and then divides the vector by its sum. Iteration stops once the L1 distance
between two consecutive vectors is at most ``tolerance``.

In parallel mode the ``inflow`` terms are computed by one task per node on a
thread pool; the damping and normalization step runs only after every task
has delivered its result.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from site_rank.config import RunConfig
from site_rank.graph import GraphStore
from site_rank.logger import LOGGER_NAME

__all__ = ["EmptyGraphError", "PageRankSolver", "Ranking"]

DAMPING_FACTOR = 0.85
TOLERANCE = 0.0001

logger = logging.getLogger(LOGGER_NAME)


class EmptyGraphError(ValueError):
    """Raised when ranking a graph without nodes."""


@dataclass
class Ranking:
    """Result of one ranking run, in node-index order."""

    labels: List[str]
    ranks: np.ndarray
    iterations: int
    converged: bool = True

    @property
    def total(self) -> float:
        return float(self.ranks.sum())

    def pairs(self) -> List[Tuple[str, float]]:
        return [(label, float(rank)) for label, rank in zip(self.labels, self.ranks)]

    def top(self, k: int) -> List[Tuple[int, str, float]]:
        """The ``k`` best-ranked nodes as ``(index, label, rank)``, highest first."""
        order = np.argsort(-self.ranks, kind="stable")[:k]
        return [(int(i), self.labels[i], float(self.ranks[i])) for i in order]


class _Inflow:
    """Read-only incoming-edge view of a graph: per node, source indices and link weights."""

    def __init__(self, graph: GraphStore) -> None:
        out_degree = graph.out_degree
        self.sources: List[np.ndarray] = []
        self.weights: List[np.ndarray] = []
        for incoming in graph.in_edges():
            self.sources.append(np.fromiter((src for src, _ in incoming), dtype=np.int64, count=len(incoming)))
            self.weights.append(
                np.fromiter(
                    (count / out_degree[src] for src, count in incoming),
                    dtype=np.float64,
                    count=len(incoming),
                )
            )

    def __call__(self, i: int, rank: np.ndarray) -> float:
        if not self.sources[i].size:
            return 0.0
        return float(np.dot(rank[self.sources[i]], self.weights[i]))


class PageRankSolver:
    """Sequential or thread-parallel power iteration."""

    def __init__(
        self,
        damping: float = DAMPING_FACTOR,
        tolerance: float = TOLERANCE,
        parallel: bool = False,
        max_workers: Optional[int] = None,
        max_iterations: Optional[int] = None,
    ) -> None:
        if not 0.0 <= damping <= 1.0:
            raise ValueError(f"damping must be within [0, 1], got {damping}")
        if tolerance <= 0:
            raise ValueError(f"tolerance must be > 0, got {tolerance}")
        self.damping = damping
        self.tolerance = tolerance
        self.parallel = parallel
        self.max_workers = max_workers
        self.max_iterations = max_iterations

    @classmethod
    def from_config(cls, config: RunConfig) -> PageRankSolver:
        return cls(
            damping=config.damping,
            tolerance=config.tolerance,
            parallel=config.parallel,
            max_workers=config.max_workers,
            max_iterations=config.max_iterations,
        )

    def solve(self, graph: GraphStore) -> Ranking:
        n = graph.node_count
        if n == 0:
            raise EmptyGraphError("Cannot rank an empty graph")

        inflow = _Inflow(graph)
        dangling = np.asarray(graph.dangling_nodes(), dtype=np.int64)
        rank = np.full(n, 1.0 / n, dtype=np.float64)
        mode = "parallel" if self.parallel else "sequential"
        logger.info("Calculating PageRank (%s) over %d nodes, %d links", mode, n, graph.edge_count)

        executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.parallel else None
        try:
            iteration = 0
            while True:
                iteration += 1
                if executor is not None:
                    inflows = self._inflows_parallel(executor, inflow, rank)
                else:
                    inflows = self._inflows_sequential(inflow, rank)
                new_rank = self._step(inflows, rank, dangling)
                delta = float(np.abs(new_rank - rank).sum())
                rank = new_rank
                logger.debug("Iteration %d: delta=%.6e", iteration, delta)
                if delta <= self.tolerance:
                    logger.info("Converged after %d iterations", iteration)
                    return Ranking(list(graph.nodes), rank, iteration, converged=True)
                if self.max_iterations is not None and iteration >= self.max_iterations:
                    logger.warning("Stopped after %d iterations without convergence (delta=%.6e)", iteration, delta)
                    return Ranking(list(graph.nodes), rank, iteration, converged=False)
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

    @staticmethod
    def _inflows_sequential(inflow: _Inflow, rank: np.ndarray) -> np.ndarray:
        return np.array([inflow(i, rank) for i in range(rank.size)], dtype=np.float64)

    @staticmethod
    def _inflows_parallel(executor: ThreadPoolExecutor, inflow: _Inflow, rank: np.ndarray) -> np.ndarray:
        snapshot = rank.copy()
        snapshot.setflags(write=False)
        futures = {executor.submit(inflow, i, snapshot): i for i in range(snapshot.size)}
        result = np.empty(snapshot.size, dtype=np.float64)
        # join: every slot is filled before the reduction step runs
        for future in as_completed(futures):
            result[futures[future]] = future.result()
        return result

    def _step(self, inflows: np.ndarray, rank: np.ndarray, dangling: Sequence[int]) -> np.ndarray:
        n = rank.size
        dangling_mass = float(rank[dangling].sum()) if len(dangling) else 0.0
        new_rank = self.damping * (inflows + dangling_mass / n) + (1.0 - self.damping) / n
        return new_rank / new_rank.sum()
