"""site_rank.report: ranking output (plain-text listing and JSON report) used by the CLI and tests."""

from site_rank.report.json_report import render_json, ranking_to_dict
from site_rank.report.text_report import render_text

__all__ = ["render_json", "render_text", "ranking_to_dict"]
