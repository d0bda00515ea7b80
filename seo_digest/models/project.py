"""Project and reporting-period models."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from seo_digest.utils.helpers import extract_domain


@dataclass(frozen=True)
class Project:
    """A web property included in a report batch."""

    name: str
    url: str
    ga_property_id: str
    gsc_site_url: str
    domain: str = ""

    def __post_init__(self) -> None:
        if not self.domain:
            object.__setattr__(self, "domain", extract_domain(self.url))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Project":
        """Build a project from request JSON (snake_case or camelCase keys)."""
        def pick(*keys: str) -> str:
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    return str(value).strip()
            return ""

        return cls(
            name=pick("name"),
            url=pick("url"),
            ga_property_id=pick("ga_property_id", "gaPropertyId"),
            gsc_site_url=pick("gsc_site_url", "gscSiteUrl"),
            domain=pick("domain"),
        )


@dataclass(frozen=True)
class Period:
    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days

    def display(self) -> "DisplayPeriod":
        return DisplayPeriod(self.start_date.isoformat(), self.end_date.isoformat())


@dataclass(frozen=True)
class ReportPeriods:
    current: Period
    previous: Period


@dataclass(frozen=True)
class DisplayPeriod:
    """A period rendered as ``YYYY-MM-DD`` strings for report headers."""

    start_date: str
    end_date: str

    @property
    def days(self) -> int:
        """Calendar days covered, both ends included."""
        return (date.fromisoformat(self.end_date) - date.fromisoformat(self.start_date)).days + 1
