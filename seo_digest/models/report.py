"""Report containers returned by the report builders."""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from seo_digest.errors import SEODigestError
from seo_digest.models.metrics import DetailedMetrics, MetricWithChange, SummaryMetrics
from seo_digest.models.project import DisplayPeriod, Project


@dataclass(frozen=True)
class ProjectReport:
    """Summary report for one project."""

    project: Project
    metrics: SummaryMetrics
    period: DisplayPeriod


@dataclass(frozen=True)
class DetailedReport:
    """Detailed report for one project.

    ``search_period`` is the Search Console window the search metrics cover.
    """

    project: Project
    metrics: DetailedMetrics
    period: DisplayPeriod
    search_period: DisplayPeriod


AnyReport = Union[ProjectReport, DetailedReport]
R = TypeVar("R", ProjectReport, DetailedReport)


@dataclass(frozen=True)
class ProjectFailure:
    project: Project
    error: SEODigestError

    def to_dict(self) -> dict:
        return {"project": self.project.name, **self.error.to_dict()}


@dataclass(frozen=True)
class ReportBatch(Generic[R]):
    """Per-project outcomes of one report request, in input order."""

    reports: list[R] = field(default_factory=list)
    failures: list[ProjectFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class BatchTotals:
    """Cross-project totals for a batch.

    ``totals`` holds summed current values.  ``changes`` holds the summed
    current/previous pair, and is present for a metric only when every
    project has a previous value.  The detailed-only fields stay ``None``
    for summary batches.
    """

    project_count: int
    totals: dict[str, float]
    changes: dict[str, MetricWithChange] = field(default_factory=dict)
    aggregate_ctr: Optional[float] = None
    average_position: Optional[float] = None
    top_projects: list[tuple[str, int]] = field(default_factory=list)
