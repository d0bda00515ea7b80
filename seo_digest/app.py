"""Report request service: validates a request, runs the builders, renders output."""

import logging
from datetime import date
from typing import Any, Optional, Union

from seo_digest.config import DEFAULT_CONFIG_PATH, ReportSettings, load_settings
from seo_digest.errors import RequestValidationError
from seo_digest.integrations.client_factory import ProviderClientFactory
from seo_digest.models import Project
from seo_digest.modules.reporting import (
    DetailedReportBuilder,
    ProjectReportBuilder,
    ReportRenderer,
    format_detailed,
    format_summary,
    summarize,
)
from seo_digest.utils.validators import (
    validate_ga_property,
    validate_gsc_site,
    validate_report_type,
    validate_url,
)

logger = logging.getLogger(__name__)


def parse_projects(payload: Any) -> list[Project]:
    """Validate a raw project list and build :class:`Project` objects.

    Raises:
        RequestValidationError: *payload* is not a non-empty list of
            well-formed project mappings.
    """
    if not isinstance(payload, list):
        raise RequestValidationError("Projects must be an array", field="projects")
    if not payload:
        raise RequestValidationError("At least one project is required", field="projects")

    projects = []
    for index, raw in enumerate(payload):
        where = f"projects[{index}]"
        if not isinstance(raw, dict):
            raise RequestValidationError(f"{where} must be an object", field=where)
        project = Project.from_dict(raw)
        if not project.name:
            raise RequestValidationError(f"{where}.name is required", field=f"{where}.name")
        for field_name, (ok, message) in (
            ("url", validate_url(project.url)),
            ("gaPropertyId", validate_ga_property(project.ga_property_id)),
            ("gscSiteUrl", validate_gsc_site(project.gsc_site_url)),
        ):
            if not ok:
                raise RequestValidationError(f"{where}.{field_name}: {message}", field=f"{where}.{field_name}")
        projects.append(project)
    return projects


def parse_end_date(value: Union[None, str, date]) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise RequestValidationError(
            f"Invalid end date {value!r}; expected YYYY-MM-DD", field="end_date"
        ) from exc


class ReportService:
    """Entry point for report requests.

    Usage::

        service = ReportService()
        result = await service.generate(projects, report_type="detailed")
        print(result["markdown"])
        await service.aclose()
    """

    def __init__(
        self,
        settings: Optional[ReportSettings] = None,
        factory: Optional[ProviderClientFactory] = None,
        config_path: str = DEFAULT_CONFIG_PATH,
        env_path: str = ".env",
        theme: str = "professional",
    ):
        self._config_path = config_path
        self._env_path = env_path
        self._settings = settings
        self._factory = factory
        self._renderer = ReportRenderer(theme)

    def initialize(self) -> None:
        """Load settings and build the provider factory.

        Raises:
            ConfigurationError: Google credentials are missing or invalid.
        """
        if self._settings is None:
            self._settings = load_settings(self._config_path, self._env_path)
        if self._factory is None:
            self._factory = ProviderClientFactory(self._settings)
            logger.info("ReportService initialised.")

    async def generate(
        self,
        projects: Any,
        report_type: str = "summary",
        end_date: Union[None, str, date] = None,
        title: Optional[str] = None,
        fail_fast: bool = False,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Build and render a report batch.

        The request is validated before any provider is contacted.

        Returns:
            Dict with ``report_type``, ``markdown``, ``summary``, ``html``,
            ``raw_html`` and ``errors`` (one entry per failed project; failed
            projects are left out of the markdown).
        """
        ok, message = validate_report_type(report_type)
        if not ok:
            raise RequestValidationError(message, field="report_type")
        parsed = parse_projects(projects)
        reference = parse_end_date(end_date)
        self.initialize()

        settings = self._settings
        logger.info("Generating %s report for %d projects", report_type, len(parsed))
        if report_type == "detailed":
            batch = await DetailedReportBuilder(self._factory, settings).build_detailed_batch(
                parsed, reference, fail_fast=fail_fast, timeout=timeout
            )
            markdown = format_detailed(batch.reports, title)
        else:
            batch = await ProjectReportBuilder(self._factory, settings).build_summaries(
                parsed, reference, fail_fast=fail_fast, timeout=timeout
            )
            markdown = format_summary(batch.reports, title)

        return {
            "report_type": report_type,
            "markdown": markdown,
            "summary": summarize(batch.reports, settings.top_projects),
            "html": self._renderer.markdown_to_html(markdown),
            "raw_html": self._renderer.markdown_to_raw_html(markdown),
            "errors": [failure.to_dict() for failure in batch.failures],
        }

    async def aclose(self) -> None:
        if self._factory is not None:
            await self._factory.aclose()
