"""Summary report builder: per-project metrics compared against the previous period."""

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, Optional, Sequence

from seo_digest.config import ReportSettings
from seo_digest.errors import (
    DegradedMetricError,
    ProviderError,
    ProviderUnavailableError,
    SEODigestError,
)
from seo_digest.models import (
    UNAVAILABLE,
    MetricWithChange,
    Project,
    ProjectFailure,
    ProjectReport,
    ReportBatch,
    SummaryMetrics,
)
from seo_digest.modules.reporting.periods import get_periods

logger = logging.getLogger(__name__)


async def run_batch(
    build: Callable[[Project], Awaitable],
    projects: Sequence[Project],
    fail_fast: bool = False,
    timeout: Optional[float] = None,
) -> ReportBatch:
    """Run *build* for every project concurrently and collect the outcomes.

    Results keep the input order regardless of completion order.  A
    project whose build raises a :class:`SEODigestError` becomes a
    :class:`ProjectFailure` and does not affect its siblings; with
    *fail_fast* the first failure (in input order) is raised once every
    build has settled.  Any other exception propagates.
    """

    async def _one(project: Project):
        if timeout is None:
            return await build(project)
        try:
            return await asyncio.wait_for(build(project), timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderUnavailableError(
                "report",
                f"no response for {project.name} within {timeout:g}s",
                remediation="Retry later or raise the timeout.",
            ) from exc

    results = await asyncio.gather(*(_one(p) for p in projects), return_exceptions=True)

    reports = []
    failures: list[ProjectFailure] = []
    for project, result in zip(projects, results):
        if isinstance(result, SEODigestError):
            logger.error("Report for %s failed: %s", project.name, result)
            failures.append(ProjectFailure(project, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            reports.append(result)

    if fail_fast and failures:
        raise failures[0].error
    logger.info("Batch complete: %d reports, %d failures", len(reports), len(failures))
    return ReportBatch(reports=reports, failures=failures)


class ProjectReportBuilder:
    """Build summary reports from Analytics, Search Console and Ahrefs.

    Usage::

        builder = ProjectReportBuilder(ProviderClientFactory(settings))
        batch = await builder.build_summaries(projects)
    """

    def __init__(self, factory, settings: Optional[ReportSettings] = None) -> None:
        self._factory = factory
        self._settings = settings or factory.settings

    async def build_summary(self, project: Project, end_date: Optional[date] = None) -> ProjectReport:
        """Build one project's summary report.

        Raises:
            ProviderError: Analytics or Search Console totals could not be
                fetched.  Indexed pages and domain rating never fail the
                report; they fall back to ``UNAVAILABLE``.
        """
        periods = get_periods(end_date, self._settings.period_days)
        logger.info("Building summary for %s (%s..%s)", project.name,
                    periods.current.start_date, periods.current.end_date)

        (page_views, engagement_events), (impressions, clicks), indexed_pages, domain_rating = (
            await asyncio.gather(
                self._fetch_analytics(project, periods),
                self._fetch_search(project, periods),
                self._indexed_pages(project),
                self._domain_rating(project),
            )
        )

        return ProjectReport(
            project=project,
            metrics=SummaryMetrics(
                page_views=page_views,
                engagement_events=engagement_events,
                total_impressions=impressions,
                total_clicks=clicks,
                indexed_pages=indexed_pages,
                domain_rating=domain_rating,
            ),
            period=periods.current.display(),
        )

    async def build_summaries(
        self,
        projects: Sequence[Project],
        end_date: Optional[date] = None,
        fail_fast: bool = False,
        timeout: Optional[float] = None,
    ) -> ReportBatch[ProjectReport]:
        return await run_batch(
            lambda project: self.build_summary(project, end_date),
            projects,
            fail_fast=fail_fast,
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Provider fetches
    # ------------------------------------------------------------------

    async def _fetch_analytics(self, project, periods) -> tuple[MetricWithChange, MetricWithChange]:
        analytics = self._factory.analytics()
        cur, prev = periods.current, periods.previous
        pid = project.ga_property_id
        try:
            cur_views, prev_views, cur_events, prev_events = await asyncio.gather(
                analytics.page_views(cur.start_date, cur.end_date, pid),
                analytics.page_views(prev.start_date, prev.end_date, pid),
                analytics.engagement_events(cur.start_date, cur.end_date, pid),
                analytics.engagement_events(prev.start_date, prev.end_date, pid),
            )
        except ProviderError as exc:
            logger.error("Analytics error for %s: %s", project.name, exc)
            raise
        return (
            MetricWithChange.compare(cur_views, prev_views),
            MetricWithChange.compare(cur_events, prev_events),
        )

    async def _fetch_search(self, project, periods) -> tuple[MetricWithChange, MetricWithChange]:
        search = self._factory.search_console()
        cur, prev = periods.current, periods.previous
        site = project.gsc_site_url
        try:
            current, previous = await asyncio.gather(
                search.total_impressions_and_clicks(cur.start_date, cur.end_date, site),
                search.total_impressions_and_clicks(prev.start_date, prev.end_date, site),
            )
        except ProviderError as exc:
            logger.error("Search Console error for %s: %s", project.name, exc)
            raise
        return (
            MetricWithChange.compare(current["impressions"], previous["impressions"]),
            MetricWithChange.compare(current["clicks"], previous["clicks"]),
        )

    async def _indexed_pages(self, project: Project) -> int:
        if not self._settings.include_indexed_pages:
            return UNAVAILABLE
        try:
            return await self._factory.search_console().indexed_pages(project.gsc_site_url)
        except ProviderError as exc:
            logger.warning("%s", DegradedMetricError(exc.provider, "indexed_pages", exc))
            return UNAVAILABLE

    async def _domain_rating(self, project: Project) -> float:
        ahrefs = self._factory.domain_authority()
        if ahrefs is None:
            return UNAVAILABLE
        try:
            return await ahrefs.rating(project.domain)
        except ProviderError as exc:
            logger.warning("%s", DegradedMetricError(exc.provider, "rating", exc))
            return UNAVAILABLE
