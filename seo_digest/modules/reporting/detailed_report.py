"""Detailed report builder: traffic breakdown, retention, search and engagement.

Traffic operations cover the 30-day comparison periods; search operations
cover the Search Console "last N days" window.  The traffic side and the
search side each fail as a unit and report their own provider.
"""

import asyncio
import dataclasses
import logging
from datetime import date
from typing import Optional, Sequence

from seo_digest.config import ReportSettings
from seo_digest.errors import ProviderError
from seo_digest.models import (
    DetailedMetrics,
    DetailedReport,
    EngagementMetrics,
    EventMetrics,
    PagePerformance,
    Project,
    ReportBatch,
    ReportPeriods,
    SearchMetrics,
    TrafficMetrics,
)
from seo_digest.modules.reporting.periods import get_periods, get_search_periods
from seo_digest.modules.reporting.problems import detect_problems
from seo_digest.modules.reporting.report_generator import run_batch

logger = logging.getLogger(__name__)


class DetailedReportBuilder:
    """Build detailed reports and attach the strategic problems they show.

    Usage::

        builder = DetailedReportBuilder(ProviderClientFactory(settings))
        report = await builder.build_detailed(project)
    """

    def __init__(self, factory, settings: Optional[ReportSettings] = None) -> None:
        self._factory = factory
        self._settings = settings or factory.settings

    async def build_detailed(
        self,
        project: Project,
        end_date: Optional[date] = None,
        compare: bool = True,
    ) -> DetailedReport:
        """Build one project's detailed report.

        With *compare* the previous period is fetched as well and every
        ``previous_*`` field of the metrics is filled in.
        """
        periods = get_periods(end_date, self._settings.period_days)
        search_periods = get_search_periods(end_date, self._settings.search_window_days)
        logger.info("Building detailed report for %s (compare=%s)", project.name, compare)

        (traffic, top_pages, engagement, events), (search, top_search_pages) = await asyncio.gather(
            self._traffic_side(project, periods, compare),
            self._search_side(project, search_periods, compare),
        )

        metrics = DetailedMetrics(
            traffic=traffic,
            search=search,
            pages=PagePerformance(top_pages=top_pages, top_search_pages=top_search_pages),
            engagement=engagement,
            events=events,
        )
        metrics = dataclasses.replace(
            metrics, problems=detect_problems(metrics, self._settings.search_window_days)
        )
        if metrics.problems:
            logger.info("%s: %d strategic problems", project.name, len(metrics.problems))

        return DetailedReport(
            project=project,
            metrics=metrics,
            period=periods.current.display(),
            search_period=search_periods.current.display(),
        )

    async def build_detailed_batch(
        self,
        projects: Sequence[Project],
        end_date: Optional[date] = None,
        compare: bool = True,
        fail_fast: bool = False,
        timeout: Optional[float] = None,
    ) -> ReportBatch[DetailedReport]:
        return await run_batch(
            lambda project: self.build_detailed(project, end_date, compare),
            projects,
            fail_fast=fail_fast,
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Traffic side (Google Analytics)
    # ------------------------------------------------------------------

    async def _traffic_side(self, project: Project, periods: ReportPeriods, compare: bool):
        ga = self._factory.analytics()
        pid = project.ga_property_id
        cur, prev = periods.current, periods.previous

        calls = [
            ga.active_users(cur.start_date, cur.end_date, pid),
            ga.retention(cur.start_date, cur.end_date, pid),
            ga.traffic_sources(cur.start_date, cur.end_date, pid),
            ga.geo_distribution(cur.start_date, cur.end_date, pid),
            ga.top_pages(cur.start_date, cur.end_date, pid),
            ga.engagement_quality(cur.start_date, cur.end_date, pid),
            ga.top_events(cur.start_date, cur.end_date, pid),
        ]
        if compare:
            calls += [
                ga.active_users(prev.start_date, prev.end_date, pid),
                ga.retention(prev.start_date, prev.end_date, pid),
                ga.engagement_quality(prev.start_date, prev.end_date, pid),
            ]

        try:
            results = await asyncio.gather(*calls)
        except ProviderError as exc:
            logger.error("Analytics error for %s: %s", project.name, exc)
            raise

        active_users, retention, sources, countries, top_pages, engagement, events = results[:7]
        prev_active_users, prev_retention, prev_engagement = results[7:] if compare else (None, None, None)

        traffic = TrafficMetrics(
            active_users=active_users,
            retention=retention,
            traffic_sources=sources,
            countries=countries,
            previous_active_users=prev_active_users,
            previous_retention=prev_retention,
        )
        engagement = EngagementMetrics(
            peak_days=engagement.peak_days,
            session_quality=engagement.session_quality,
            previous_session_quality=prev_engagement.session_quality if prev_engagement else None,
        )
        return traffic, top_pages, engagement, EventMetrics(top_events=events)

    # ------------------------------------------------------------------
    # Search side (Search Console)
    # ------------------------------------------------------------------

    async def _search_side(self, project: Project, periods: ReportPeriods, compare: bool):
        gsc = self._factory.search_console()
        site = project.gsc_site_url
        cur, prev = periods.current, periods.previous
        limit = self._settings.top_limit

        calls = [
            gsc.total_impressions_and_clicks(cur.start_date, cur.end_date, site),
            gsc.average_position(cur.start_date, cur.end_date, site),
            gsc.click_through_rate(cur.start_date, cur.end_date, site),
            gsc.top_queries(cur.start_date, cur.end_date, site, limit),
            gsc.top_search_pages(cur.start_date, cur.end_date, site, limit),
        ]
        if compare:
            calls += [
                gsc.total_impressions_and_clicks(prev.start_date, prev.end_date, site),
                gsc.average_position(prev.start_date, prev.end_date, site),
                gsc.click_through_rate(prev.start_date, prev.end_date, site),
            ]

        try:
            results = await asyncio.gather(*calls)
        except ProviderError as exc:
            logger.error("Search Console error for %s: %s", project.name, exc)
            raise

        totals, position, ctr, queries, search_pages = results[:5]
        prev_totals, prev_position, prev_ctr = results[5:] if compare else (None, None, None)

        search = SearchMetrics(
            position=position,
            ctr=ctr,
            impressions=totals["impressions"],
            clicks=totals["clicks"],
            top_queries=queries,
            previous_position=prev_position,
            previous_ctr=prev_ctr,
            previous_impressions=prev_totals["impressions"] if prev_totals else None,
            previous_clicks=prev_totals["clicks"] if prev_totals else None,
        )
        return search, search_pages
