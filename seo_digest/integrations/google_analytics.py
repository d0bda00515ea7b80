"""Google Analytics 4 traffic provider.

Page views and engagement events are fatal to the enclosing report; every
other operation degrades to an empty or zero default.
"""

import logging
from datetime import date, datetime
from typing import Any, Optional

from google.analytics.data_v1beta import BetaAnalyticsDataAsyncClient
from google.analytics.data_v1beta.types import (
    Cohort,
    CohortSpec,
    CohortsRange,
    DateRange,
    Dimension,
    Metric,
    OrderBy,
    RunReportRequest,
)

from seo_digest.integrations.base import BaseProvider, FailurePolicy, provider_operation
from seo_digest.models import (
    CountryShare,
    EngagementMetrics,
    EventShare,
    PageViews,
    RetentionMetrics,
    SessionQuality,
    TrafficSource,
)
from seo_digest.utils.helpers import rank_top, safe_div, to_number, with_shares
from seo_digest.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

GA4_SCOPES = ["https://www.googleapis.com/auth/analytics.readonly"]

# Automatically collected events that say nothing about user intent.
SYSTEM_EVENTS = frozenset({"page_view", "first_visit", "session_start"})

# Placeholder retention used when the cohort query fails.  These are rough
# industry averages, not measurements; results are flagged ``estimated``.
ESTIMATED_DAY1_RETENTION = 25.0
ESTIMATED_DAY7_RETENTION = 10.0

PEAK_DAYS = 3


def _estimated_retention(provider, *args, **kwargs) -> RetentionMetrics:
    return RetentionMetrics(
        day1=ESTIMATED_DAY1_RETENTION,
        day7=ESTIMATED_DAY7_RETENTION,
        estimated=True,
    )


class GoogleAnalyticsProvider(BaseProvider):
    """Traffic metrics from the GA4 Data API.

    One instance is shared by every project build; the property is passed
    on each call.

    Usage::

        ga = GoogleAnalyticsProvider(BetaAnalyticsDataAsyncClient(credentials=creds))
        views = await ga.page_views(start, end, "properties/123456789")
    """

    provider_name = "Google Analytics"

    def __init__(
        self,
        client: BetaAnalyticsDataAsyncClient,
        limiter: Optional[RateLimiter] = None,
        top_limit: int = 10,
    ):
        self._client = client
        self._limiter = limiter or RateLimiter(requests_per_minute=600, name="google_analytics")
        self._top_limit = top_limit

    # ------------------------------------------------------------------
    # Low-level report execution
    # ------------------------------------------------------------------

    async def _execute(
        self,
        request: RunReportRequest,
        dimensions: list[str],
        metrics: list[str],
    ) -> list[dict[str, Any]]:
        """Run a report request and return parsed rows."""
        async with self._limiter:
            response = await self._client.run_report(request=request)

        rows: list[dict[str, Any]] = []
        for row in response.rows:
            entry: dict[str, Any] = {}
            for i, dim in enumerate(dimensions):
                entry[dim] = row.dimension_values[i].value
            for i, met in enumerate(metrics):
                entry[met] = to_number(row.metric_values[i].value)
            rows.append(entry)
        logger.debug("GA4 report %s: %d rows", request.property, len(rows))
        return rows

    async def _run_report(
        self,
        property_id: str,
        start: date,
        end: date,
        metrics: list[str],
        dimensions: Optional[list[str]] = None,
        order_by_metric: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        dimensions = dimensions or []
        request = RunReportRequest(
            property=_property_name(property_id),
            date_ranges=[DateRange(start_date=start.isoformat(), end_date=end.isoformat())],
            dimensions=[Dimension(name=d) for d in dimensions],
            metrics=[Metric(name=m) for m in metrics],
        )
        if order_by_metric:
            request.order_bys = [
                OrderBy(metric=OrderBy.MetricOrderBy(metric_name=order_by_metric), desc=True)
            ]
        return await self._execute(request, dimensions, metrics)

    async def _total(self, property_id: str, start: date, end: date, metric: str) -> int:
        rows = await self._run_report(property_id, start, end, [metric])
        if not rows:
            return 0
        return int(rows[0][metric])

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @provider_operation(FailurePolicy.FATAL)
    async def page_views(self, start: date, end: date, property_id: str) -> int:
        return await self._total(property_id, start, end, "screenPageViews")

    @provider_operation(FailurePolicy.FATAL)
    async def engagement_events(self, start: date, end: date, property_id: str) -> int:
        return await self._total(property_id, start, end, "eventCount")

    @provider_operation(FailurePolicy.DEGRADE, default=0)
    async def active_users(self, start: date, end: date, property_id: str) -> int:
        return await self._total(property_id, start, end, "activeUsers")

    @provider_operation(FailurePolicy.DEGRADE, fallback=_estimated_retention)
    async def retention(self, start: date, end: date, property_id: str) -> RetentionMetrics:
        """Day-1 and day-7 retention of users first seen in the period."""
        dimensions = ["cohort", "cohortNthDay"]
        metrics = ["cohortActiveUsers"]
        request = RunReportRequest(
            property=_property_name(property_id),
            dimensions=[Dimension(name=d) for d in dimensions],
            metrics=[Metric(name=m) for m in metrics],
            cohort_spec=CohortSpec(
                cohorts=[
                    Cohort(
                        name="period",
                        dimension="firstSessionDate",
                        date_range=DateRange(
                            start_date=start.isoformat(), end_date=end.isoformat()
                        ),
                    )
                ],
                cohorts_range=CohortsRange(
                    granularity=CohortsRange.Granularity.DAILY,
                    start_offset=0,
                    end_offset=7,
                ),
            ),
        )
        rows = await self._execute(request, dimensions, metrics)
        by_day = {int(row["cohortNthDay"]): row["cohortActiveUsers"] for row in rows}
        base = by_day.get(0, 0)
        return RetentionMetrics(
            day1=round(safe_div(by_day.get(1, 0), base) * 100, 2),
            day7=round(safe_div(by_day.get(7, 0), base) * 100, 2),
        )

    @provider_operation(FailurePolicy.DEGRADE, default=[])
    async def traffic_sources(self, start: date, end: date, property_id: str) -> list[TrafficSource]:
        rows = await self._run_report(
            property_id, start, end, ["activeUsers"], ["sessionSource"], order_by_metric="activeUsers"
        )
        return [
            TrafficSource(source=row["sessionSource"], users=int(row["activeUsers"]), pct=row["pct"])
            for row in with_shares(rows, "activeUsers", self._top_limit)
        ]

    @provider_operation(FailurePolicy.DEGRADE, default=[])
    async def geo_distribution(self, start: date, end: date, property_id: str) -> list[CountryShare]:
        rows = await self._run_report(
            property_id, start, end, ["activeUsers"], ["country"], order_by_metric="activeUsers"
        )
        return [
            CountryShare(country=row["country"], users=int(row["activeUsers"]), pct=row["pct"])
            for row in with_shares(rows, "activeUsers", self._top_limit)
        ]

    @provider_operation(FailurePolicy.DEGRADE, default=[])
    async def top_pages(self, start: date, end: date, property_id: str) -> list[PageViews]:
        rows = await self._run_report(
            property_id,
            start,
            end,
            ["screenPageViews"],
            ["pagePath", "pageTitle"],
            order_by_metric="screenPageViews",
        )
        ranked = rank_top(rows, key=lambda row: row["screenPageViews"], limit=self._top_limit)
        return [
            PageViews(
                page=row["pageTitle"] or row["pagePath"],
                url=row["pagePath"],
                views=int(row["screenPageViews"]),
            )
            for row in ranked
        ]

    @provider_operation(FailurePolicy.DEGRADE, default=EngagementMetrics())
    async def engagement_quality(self, start: date, end: date, property_id: str) -> EngagementMetrics:
        """Peak engagement days and the spread of daily average session length."""
        rows = await self._run_report(
            property_id, start, end, ["engagedSessions", "averageSessionDuration"], ["date"]
        )
        if not rows:
            return EngagementMetrics()
        rows.sort(key=lambda row: row["date"])
        peaks = rank_top(rows, key=lambda row: row["engagedSessions"], limit=PEAK_DAYS)
        durations = [float(row["averageSessionDuration"]) for row in rows]
        return EngagementMetrics(
            peak_days=[datetime.strptime(row["date"], "%Y%m%d").date() for row in peaks],
            session_quality=SessionQuality(
                min_seconds=round(min(durations), 2),
                max_seconds=round(max(durations), 2),
                avg_seconds=round(sum(durations) / len(durations), 2),
            ),
        )

    @provider_operation(FailurePolicy.DEGRADE, default=[])
    async def top_events(self, start: date, end: date, property_id: str) -> list[EventShare]:
        rows = await self._run_report(
            property_id, start, end, ["eventCount"], ["eventName"], order_by_metric="eventCount"
        )
        custom = [row for row in rows if row["eventName"] not in SYSTEM_EVENTS]
        return [
            EventShare(name=row["eventName"], count=int(row["eventCount"]), pct=row["pct"])
            for row in with_shares(custom, "eventCount", self._top_limit)
        ]

    async def close(self) -> None:
        """Close the gRPC channel of the underlying client."""
        await self._client.transport.close()


def _property_name(property_id: str) -> str:
    pid = property_id.strip()
    return pid if pid.startswith("properties/") else f"properties/{pid}"
