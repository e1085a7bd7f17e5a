# site_rank/report/text_report.py
"""Plain-text ranking listing: one ``<url> <rank>`` line per node, then the sum."""
from __future__ import annotations

from typing import List

from site_rank.pagerank import Ranking


def render_text(ranking: Ranking) -> str:
    lines: List[str] = [f"{label} {rank!r}" for label, rank in ranking.pairs()]
    lines.append(repr(ranking.total))
    return "\n".join(lines)
