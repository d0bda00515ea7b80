"""Metric value objects for summary and detailed reports."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from seo_digest.utils.helpers import percentage_change

# Point-in-time value whose provider is not configured or failed.
UNAVAILABLE = -1


def is_available(value: float) -> bool:
    return value != UNAVAILABLE


@dataclass(frozen=True)
class MetricWithChange:
    current: float
    previous: float
    percentage_change: float

    @classmethod
    def compare(cls, current: float, previous: float) -> "MetricWithChange":
        return cls(current, previous, percentage_change(current, previous))


def _compare_optional(current: float, previous: Optional[float]) -> Optional[MetricWithChange]:
    if previous is None:
        return None
    return MetricWithChange.compare(current, previous)


# ---------------------------------------------------------------------------
# Summary report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryMetrics:
    page_views: MetricWithChange
    engagement_events: MetricWithChange
    total_impressions: MetricWithChange
    total_clicks: MetricWithChange
    indexed_pages: int = UNAVAILABLE
    domain_rating: float = UNAVAILABLE


# ---------------------------------------------------------------------------
# Detailed report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetentionMetrics:
    """Share of a cohort still active after 1 and 7 days, in percent.

    ``estimated`` is set when the cohort query failed and the values are
    placeholders rather than measured data.
    """

    day1: float
    day7: float
    estimated: bool = False


@dataclass(frozen=True)
class TrafficSource:
    source: str
    users: int
    pct: float


@dataclass(frozen=True)
class CountryShare:
    country: str
    users: int
    pct: float


@dataclass(frozen=True)
class TrafficMetrics:
    active_users: int
    retention: RetentionMetrics
    traffic_sources: list[TrafficSource] = field(default_factory=list)
    countries: list[CountryShare] = field(default_factory=list)
    previous_active_users: Optional[int] = None
    previous_retention: Optional[RetentionMetrics] = None

    @property
    def active_users_change(self) -> Optional[MetricWithChange]:
        return _compare_optional(self.active_users, self.previous_active_users)

    @property
    def day1_retention_change(self) -> Optional[MetricWithChange]:
        if self.previous_retention is None:
            return None
        return MetricWithChange.compare(self.retention.day1, self.previous_retention.day1)

    @property
    def day7_retention_change(self) -> Optional[MetricWithChange]:
        if self.previous_retention is None:
            return None
        return MetricWithChange.compare(self.retention.day7, self.previous_retention.day7)


@dataclass(frozen=True)
class DevicePosition:
    desktop: float
    mobile: float

    @property
    def average(self) -> float:
        return (self.desktop + self.mobile) / 2


@dataclass(frozen=True)
class SearchQuery:
    query: str
    clicks: int
    impressions: int
    ctr: float
    position: float


@dataclass(frozen=True)
class SearchMetrics:
    position: DevicePosition
    ctr: float
    impressions: int
    clicks: int
    top_queries: list[SearchQuery] = field(default_factory=list)
    previous_position: Optional[DevicePosition] = None
    previous_ctr: Optional[float] = None
    previous_impressions: Optional[int] = None
    previous_clicks: Optional[int] = None

    @property
    def desktop_position_change(self) -> Optional[MetricWithChange]:
        if self.previous_position is None:
            return None
        return MetricWithChange.compare(self.position.desktop, self.previous_position.desktop)

    @property
    def mobile_position_change(self) -> Optional[MetricWithChange]:
        if self.previous_position is None:
            return None
        return MetricWithChange.compare(self.position.mobile, self.previous_position.mobile)

    @property
    def ctr_change(self) -> Optional[MetricWithChange]:
        return _compare_optional(self.ctr, self.previous_ctr)

    @property
    def impressions_change(self) -> Optional[MetricWithChange]:
        return _compare_optional(self.impressions, self.previous_impressions)

    @property
    def clicks_change(self) -> Optional[MetricWithChange]:
        return _compare_optional(self.clicks, self.previous_clicks)


@dataclass(frozen=True)
class PageViews:
    page: str
    url: str
    views: int


@dataclass(frozen=True)
class SearchPage:
    page: str
    url: str
    impressions: int
    clicks: int
    ctr: float
    position: float


@dataclass(frozen=True)
class PagePerformance:
    top_pages: list[PageViews] = field(default_factory=list)
    top_search_pages: list[SearchPage] = field(default_factory=list)


@dataclass(frozen=True)
class SessionQuality:
    min_seconds: float = 0.0
    max_seconds: float = 0.0
    avg_seconds: float = 0.0


@dataclass(frozen=True)
class EngagementMetrics:
    peak_days: list[date] = field(default_factory=list)
    session_quality: SessionQuality = field(default_factory=SessionQuality)
    previous_session_quality: Optional[SessionQuality] = None

    @property
    def avg_session_change(self) -> Optional[MetricWithChange]:
        if self.previous_session_quality is None:
            return None
        return MetricWithChange.compare(
            self.session_quality.avg_seconds,
            self.previous_session_quality.avg_seconds,
        )


@dataclass(frozen=True)
class EventShare:
    name: str
    count: int
    pct: float


@dataclass(frozen=True)
class EventMetrics:
    top_events: list[EventShare] = field(default_factory=list)


@dataclass(frozen=True)
class DetailedMetrics:
    traffic: TrafficMetrics
    search: SearchMetrics
    pages: PagePerformance
    engagement: EngagementMetrics
    events: EventMetrics
    problems: list[str] = field(default_factory=list)
