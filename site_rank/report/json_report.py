# site_rank/report/json_report.py

"""
JSON report of a ranking run.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from site_rank.pagerank import Ranking


def ranking_to_dict(ranking: Ranking) -> Dict[str, Any]:
    return {
        "ranks": [
            {"index": i, "url": label, "rank": rank}
            for i, (label, rank) in enumerate(ranking.pairs())
        ],
        "sum": ranking.total,
        "iterations": ranking.iterations,
        "converged": ranking.converged,
    }


def render_json(ranking: Ranking, output_path: Path | str) -> Path:
    """
    Save ``ranking`` as JSON at ``output_path``.

    :param ranking: result of PageRankSolver.solve
    :param output_path: path of the JSON file
    :return: Path of the saved file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open("w", encoding="utf-8") as f:
        json.dump(ranking_to_dict(ranking), f, ensure_ascii=False, indent=2)

    return output
