"""Report data model: immutable value objects built fresh per request."""

from seo_digest.models.project import (
    DisplayPeriod,
    Period,
    Project,
    ReportPeriods,
)
from seo_digest.models.metrics import (
    UNAVAILABLE,
    CountryShare,
    DetailedMetrics,
    DevicePosition,
    EngagementMetrics,
    EventMetrics,
    EventShare,
    MetricWithChange,
    PagePerformance,
    PageViews,
    RetentionMetrics,
    SearchMetrics,
    SearchPage,
    SearchQuery,
    SessionQuality,
    SummaryMetrics,
    TrafficMetrics,
    TrafficSource,
    is_available,
)
from seo_digest.models.report import (
    AnyReport,
    BatchTotals,
    DetailedReport,
    ProjectFailure,
    ProjectReport,
    ReportBatch,
)

__all__ = [
    "DisplayPeriod",
    "Period",
    "Project",
    "ReportPeriods",
    "UNAVAILABLE",
    "CountryShare",
    "DetailedMetrics",
    "DevicePosition",
    "EngagementMetrics",
    "EventMetrics",
    "EventShare",
    "MetricWithChange",
    "PagePerformance",
    "PageViews",
    "RetentionMetrics",
    "SearchMetrics",
    "SearchPage",
    "SearchQuery",
    "SessionQuality",
    "SummaryMetrics",
    "TrafficMetrics",
    "TrafficSource",
    "is_available",
    "AnyReport",
    "BatchTotals",
    "DetailedReport",
    "ProjectFailure",
    "ProjectReport",
    "ReportBatch",
]
