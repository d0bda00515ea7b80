"""Reporting module: period comparison, report building, problem detection and rendering."""

from seo_digest.modules.reporting.detailed_report import DetailedReportBuilder
from seo_digest.modules.reporting.periods import get_periods, get_search_periods
from seo_digest.modules.reporting.problems import detect_problems
from seo_digest.modules.reporting.report_formatter import (
    aggregate_totals,
    format_detailed,
    format_summary,
    summarize,
)
from seo_digest.modules.reporting.report_generator import ProjectReportBuilder, run_batch
from seo_digest.modules.reporting.report_renderer import ReportRenderer

__all__ = [
    "DetailedReportBuilder",
    "ProjectReportBuilder",
    "ReportRenderer",
    "aggregate_totals",
    "detect_problems",
    "format_detailed",
    "format_summary",
    "get_periods",
    "get_search_periods",
    "run_batch",
    "summarize",
]
