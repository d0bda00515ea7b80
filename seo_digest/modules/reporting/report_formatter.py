"""Markdown rendering of summary and detailed report batches.

Every function here is pure: the same reports always render to the same
text.  Changes follow one convention everywhere: ``+X.X%`` for growth,
``-X.X%`` for decline and ``0.0%`` when the change rounds to zero.
"""

from typing import Optional, Sequence

from seo_digest.models import (
    BatchTotals,
    DetailedReport,
    MetricWithChange,
    ProjectReport,
    is_available,
)
from seo_digest.modules.reporting.problems import (
    ctr_breached,
    impressions_breached,
    position_breached,
    retention_breached,
)
from seo_digest.utils.helpers import format_duration, format_int, rank_top, safe_div

ARROW_UP = "↑"
ARROW_DOWN = "↓"
ARROW_FLAT = "→"

DEFAULT_TOP_PROJECTS = 3

SUMMARY_METRICS = [
    ("page_views", "Page Views"),
    ("engagement_events", "Engagement Events"),
    ("total_impressions", "Impressions"),
    ("total_clicks", "Clicks"),
]

DETAILED_METRICS = [
    ("active_users", "Active Users"),
    ("impressions", "Impressions"),
    ("clicks", "Clicks"),
]


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------


def format_change(change: float) -> str:
    rounded = round(change, 1)
    if rounded > 0:
        return f"+{rounded:.1f}%"
    if rounded < 0:
        return f"{rounded:.1f}%"
    return "0.0%"


def change_arrow(change: float) -> str:
    rounded = round(change, 1)
    if rounded > 0:
        return ARROW_UP
    if rounded < 0:
        return ARROW_DOWN
    return ARROW_FLAT


def _pct(value: float) -> str:
    return f"{value:.2f}%"


def _position(value: float) -> str:
    return f"{value:.2f}"


def _cell(text: str) -> str:
    return str(text).replace("|", "\\|")


def _severity(label: str, level: Optional[str]) -> str:
    return f"{label} **{level}**" if level else label


def _header(project) -> str:
    return f"## {project.name} – [Visit website]({project.url})"


def _comparison_row(label: str, current: str, change: Optional[MetricWithChange], fmt=format_int) -> str:
    if change is None:
        return f"| {label} | {current} | - | - |"
    return (
        f"| {label} | {current} | {fmt(change.previous)} | "
        f"{change_arrow(change.percentage_change)} {format_change(change.percentage_change)} |"
    )


COMPARISON_HEADER = [
    "| Metric | Current | Previous | Change |",
    "|--------|--------:|---------:|-------:|",
]


# ---------------------------------------------------------------------------
# Summary report
# ---------------------------------------------------------------------------


def _format_summary_table(report: ProjectReport) -> str:
    m = report.metrics

    def row(label: str, metric: MetricWithChange) -> str:
        return (
            f"| {label} | {format_int(metric.current)} | {format_int(metric.previous)} | "
            f"{format_change(metric.percentage_change)} |"
        )

    indexed = format_int(m.indexed_pages) if is_available(m.indexed_pages) else "N/A"
    rating = f"{m.domain_rating:g}" if is_available(m.domain_rating) else "N/A"
    lines = [
        "| Stat | Current | Previous | Change |",
        "|------|--------:|---------:|-------:|",
        row("Page Views", m.page_views),
        row("User Engagement Events", m.engagement_events),
        f"| Google Indexed Pages | {indexed} | - | - |",
        row("Total Impressions", m.total_impressions),
        row("Total Clicks", m.total_clicks),
        f"| Ahrefs Domain Rating (DR) | {rating} | - | - |",
    ]
    return "\n".join(lines)


def _format_summary_project(report: ProjectReport) -> str:
    return "\n".join([
        _header(report.project),
        "",
        f"Period: {report.period.start_date} to {report.period.end_date}",
        "",
        "### Statistics",
        "",
        _format_summary_table(report),
        "",
    ])


def format_summary(reports: Sequence[ProjectReport], title: Optional[str] = None) -> str:
    """Render a batch of summary reports as one markdown document."""
    if not reports:
        return f"# {title or 'Analytics Report'}\n\nNo project reports.\n"
    period = reports[0].period
    report_title = title or f"Analytics Report - {period.start_date} to {period.end_date}"
    sections = "\n\n".join(_format_summary_project(r) for r in reports)
    return f"# {report_title}\n\n{sections}"


# ---------------------------------------------------------------------------
# Detailed report
# ---------------------------------------------------------------------------


def _table(headers: list[str], align: list[str], rows: list[list[str]]) -> list[str]:
    if not rows:
        return ["_No data._"]
    divider = ["-" * max(3, len(h)) for h in headers]
    divider = [d + ":" if a == "r" else d for d, a in zip(divider, align)]
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join(divider) + "|",
    ]
    lines += ["| " + " | ".join(_cell(c) for c in row) + " |" for row in rows]
    return lines


def _traffic_section(report: DetailedReport) -> list[str]:
    traffic = report.metrics.traffic
    retention = traffic.retention
    lines = ["### Traffic & Engagement", "", *COMPARISON_HEADER]
    lines.append(_comparison_row("Active Users", format_int(traffic.active_users), traffic.active_users_change))
    suffix = " (estimated)" if retention.estimated else ""
    lines.append(_comparison_row(
        f"Day 1 Retention{suffix}", _pct(retention.day1), traffic.day1_retention_change, _pct
    ))
    lines.append(_comparison_row(
        _severity(f"Day 7 Retention{suffix}", "CRITICAL" if retention_breached(retention.day7) else None),
        _pct(retention.day7),
        traffic.day7_retention_change,
        _pct,
    ))
    if retention.estimated:
        lines += ["", "_Retention figures are estimated (cohort data unavailable), not measured._"]

    lines += ["", "**Top Traffic Sources**", ""]
    lines += _table(
        ["Source", "Users", "Share"], ["l", "r", "r"],
        [[s.source, format_int(s.users), f"{s.pct:.1f}%"] for s in traffic.traffic_sources],
    )
    lines += ["", "**Top Countries**", ""]
    lines += _table(
        ["Country", "Users", "Share"], ["l", "r", "r"],
        [[c.country, format_int(c.users), f"{c.pct:.1f}%"] for c in traffic.countries],
    )
    return lines


def _search_section(report: DetailedReport) -> list[str]:
    search = report.metrics.search
    window = report.search_period
    average_change = None
    if search.previous_position is not None:
        average_change = MetricWithChange.compare(search.position.average, search.previous_position.average)

    lines = [
        f"### Search Performance (last {window.days} days: {window.start_date} to {window.end_date})",
        "",
        *COMPARISON_HEADER,
        _comparison_row("Avg. Position (Desktop)", _position(search.position.desktop),
                        search.desktop_position_change, _position),
        _comparison_row("Avg. Position (Mobile)", _position(search.position.mobile),
                        search.mobile_position_change, _position),
        _comparison_row(
            _severity("Avg. Position (Overall)", "URGENT" if position_breached(search.position.average) else None),
            _position(search.position.average), average_change, _position,
        ),
        _comparison_row(
            _severity("Click-Through Rate", "CRITICAL" if ctr_breached(search.ctr) else None),
            _pct(search.ctr), search.ctr_change, _pct,
        ),
        _comparison_row(
            _severity("Impressions", "WARNING" if impressions_breached(search.impressions) else None),
            format_int(search.impressions), search.impressions_change,
        ),
        _comparison_row("Clicks", format_int(search.clicks), search.clicks_change),
    ]
    return lines


def _pages_section(report: DetailedReport) -> list[str]:
    pages = report.metrics.pages
    lines = ["### Page Performance", "", "**Most Viewed Pages**", ""]
    lines += _table(
        ["Page", "Path", "Views"], ["l", "l", "r"],
        [[p.page, p.url, format_int(p.views)] for p in pages.top_pages],
    )
    lines += ["", "**Top Search Landing Pages**", ""]
    lines += _table(
        ["Page", "Impressions", "Clicks", "CTR", "Position"], ["l", "r", "r", "r", "r"],
        [
            [f"[{p.page}]({p.url})", format_int(p.impressions), format_int(p.clicks), _pct(p.ctr), _position(p.position)]
            for p in pages.top_search_pages
        ],
    )
    return lines


def _queries_section(report: DetailedReport) -> list[str]:
    lines = ["### Top Queries", ""]
    lines += _table(
        ["Query", "Clicks", "Impressions", "CTR", "Position"], ["l", "r", "r", "r", "r"],
        [
            [q.query, format_int(q.clicks), format_int(q.impressions), _pct(q.ctr), _position(q.position)]
            for q in report.metrics.search.top_queries
        ],
    )
    return lines


def _engagement_section(report: DetailedReport) -> list[str]:
    engagement = report.metrics.engagement
    quality = engagement.session_quality
    peaks = ", ".join(d.isoformat() for d in engagement.peak_days) or "n/a"
    session = (
        f"- Session duration: min {format_duration(quality.min_seconds)} · "
        f"avg {format_duration(quality.avg_seconds)} · max {format_duration(quality.max_seconds)}"
    )
    change = engagement.avg_session_change
    if change is not None:
        session += (
            f" ({change_arrow(change.percentage_change)} {format_change(change.percentage_change)} "
            "avg vs previous period)"
        )
    return ["### Engagement Patterns", "", f"- Peak engagement days: {peaks}", session]


def _events_section(report: DetailedReport) -> list[str]:
    lines = ["### Events", ""]
    lines += _table(
        ["Event", "Count", "Share"], ["l", "r", "r"],
        [[e.name, format_int(e.count), f"{e.pct:.1f}%"] for e in report.metrics.events.top_events],
    )
    return lines


def _problems_section(report: DetailedReport) -> list[str]:
    problems = report.metrics.problems
    lines = ["### Strategic Problems", ""]
    if not problems:
        return lines + ["No strategic problems detected."]
    return lines + [f"{i}. {problem}" for i, problem in enumerate(problems, start=1)]


def _format_detailed_project(report: DetailedReport) -> str:
    lines = [
        _header(report.project),
        "",
        f"Period: {report.period.start_date} to {report.period.end_date}",
        "",
    ]
    for section in (
        _traffic_section,
        _search_section,
        _pages_section,
        _queries_section,
        _engagement_section,
        _events_section,
        _problems_section,
    ):
        lines += section(report)
        lines.append("")
    return "\n".join(lines)


def format_detailed(reports: Sequence[DetailedReport], title: Optional[str] = None) -> str:
    """Render a batch of detailed reports as one markdown document."""
    if not reports:
        return f"# {title or 'Detailed Analytics Report'}\n\nNo project reports.\n"
    period = reports[0].period
    report_title = title or f"Detailed Analytics Report - {period.start_date} to {period.end_date}"
    sections = "\n\n".join(_format_detailed_project(r) for r in reports)
    return f"# {report_title}\n\n{sections}"


# ---------------------------------------------------------------------------
# Cross-project summary
# ---------------------------------------------------------------------------


def _metric_pairs(report) -> dict[str, tuple[float, Optional[float]]]:
    if isinstance(report, DetailedReport):
        traffic, search = report.metrics.traffic, report.metrics.search
        return {
            "active_users": (traffic.active_users, traffic.previous_active_users),
            "impressions": (search.impressions, search.previous_impressions),
            "clicks": (search.clicks, search.previous_clicks),
        }
    m = report.metrics
    return {
        key: (getattr(m, key).current, getattr(m, key).previous)
        for key, _ in SUMMARY_METRICS
    }


def aggregate_totals(reports: Sequence, top_n: int = DEFAULT_TOP_PROJECTS) -> BatchTotals:
    """Sum every compared metric across the batch.

    Percentage changes are recomputed from the summed values, never
    averaged across projects.  Detailed batches also get a CTR computed
    from summed clicks and impressions, the plain mean of the projects'
    average positions, and the *top_n* projects by active users.
    """
    pairs = [_metric_pairs(r) for r in reports]
    keys = list(pairs[0]) if pairs else []
    totals: dict[str, float] = {}
    changes: dict[str, MetricWithChange] = {}
    for key in keys:
        totals[key] = sum(p[key][0] for p in pairs)
        previous = [p[key][1] for p in pairs]
        if all(v is not None for v in previous):
            changes[key] = MetricWithChange.compare(totals[key], sum(previous))

    if not reports or not isinstance(reports[0], DetailedReport):
        return BatchTotals(project_count=len(reports), totals=totals, changes=changes)

    positions = [r.metrics.search.position.average for r in reports]
    ranked = rank_top(
        [(r.project.name, r.metrics.traffic.active_users) for r in reports],
        key=lambda item: item[1],
        limit=top_n,
    )
    return BatchTotals(
        project_count=len(reports),
        totals=totals,
        changes=changes,
        aggregate_ctr=round(safe_div(totals["clicks"], totals["impressions"]) * 100, 2),
        average_position=round(sum(positions) / len(positions), 2),
        top_projects=ranked,
    )


def summarize(reports: Sequence, top_n: int = DEFAULT_TOP_PROJECTS) -> str:
    """One-paragraph numeric summary of the whole batch."""
    if not reports:
        return "No project reports to summarize."
    totals = aggregate_totals(reports, top_n)
    labels = DETAILED_METRICS if isinstance(reports[0], DetailedReport) else SUMMARY_METRICS
    period = reports[0].period

    lines = [f"Totals across {totals.project_count} projects ({period.start_date} to {period.end_date}):"]
    for key, label in labels:
        change = totals.changes.get(key)
        line = f"- {label}: {format_int(totals.totals[key])}"
        if change is not None:
            line += f" (previous {format_int(change.previous)}, {format_change(change.percentage_change)})"
        lines.append(line)

    if totals.aggregate_ctr is not None:
        lines.append(f"- Aggregate CTR: {_pct(totals.aggregate_ctr)}")
        lines.append(f"- Average Position: {_position(totals.average_position)}")
        ranking = ", ".join(f"{name} ({format_int(users)})" for name, users in totals.top_projects)
        lines.append(f"- Top projects by active users: {ranking}")
    return "\n".join(lines)
