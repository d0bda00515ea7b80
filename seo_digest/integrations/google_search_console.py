"""Google Search Console search-performance provider."""

import asyncio
import logging
from datetime import date
from typing import Any, Optional

import httplib2
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import Resource, build

from seo_digest.integrations.base import BaseProvider, FailurePolicy, provider_operation
from seo_digest.models import DevicePosition, SearchPage, SearchQuery
from seo_digest.utils.helpers import page_title_from_url, safe_div, to_number
from seo_digest.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

GSC_SCOPES = ["https://www.googleapis.com/auth/webmasters.readonly"]


def build_service(credentials) -> Resource:
    """Build the Search Console discovery client without network access."""
    return build("searchconsole", "v1", credentials=credentials, cache_discovery=False)


class SearchConsoleProvider(BaseProvider):
    """Search performance metrics from the Search Console API.

    The discovery client is synchronous, so requests run in a worker
    thread.  Each request executes on its own authorized transport because
    ``httplib2.Http`` objects cannot be shared between threads.

    Usage::

        gsc = SearchConsoleProvider(build_service(creds), creds)
        totals = await gsc.total_impressions_and_clicks(start, end, "https://example.com/")
    """

    provider_name = "Search Console"

    def __init__(
        self,
        service: Resource,
        credentials,
        limiter: Optional[RateLimiter] = None,
        top_limit: int = 10,
    ):
        self._service = service
        self._credentials = credentials
        self._limiter = limiter or RateLimiter(requests_per_minute=1200, name="search_console")
        self._top_limit = top_limit

    def _execute_sync(self, request) -> dict[str, Any]:
        http = AuthorizedHttp(self._credentials, http=httplib2.Http())
        return request.execute(http=http)

    async def _execute(self, request) -> dict[str, Any]:
        async with self._limiter:
            return await asyncio.to_thread(self._execute_sync, request)

    async def _query(
        self,
        site_url: str,
        start: date,
        end: date,
        dimensions: Optional[list[str]] = None,
        row_limit: int = 1,
        device: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Run a search analytics query and return its raw rows."""
        body: dict[str, Any] = {
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "dimensions": dimensions or [],
            "rowLimit": row_limit,
        }
        if device:
            body["dimensionFilterGroups"] = [
                {"filters": [{"dimension": "device", "expression": device}]}
            ]
        request = self._service.searchanalytics().query(siteUrl=site_url, body=body)
        response = await self._execute(request)
        rows = response.get("rows", [])
        logger.debug("GSC query %s %s: %d rows", site_url, dimensions, len(rows))
        return rows

    @staticmethod
    def _row_stats(row: dict[str, Any]) -> dict[str, Any]:
        clicks = row.get("clicks", 0) or 0
        impressions = row.get("impressions", 0) or 0
        return {
            "clicks": round(clicks),
            "impressions": round(impressions),
            "ctr": round(safe_div(clicks, impressions) * 100, 2),
            "position": round(row.get("position", 0) or 0, 2),
        }

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @provider_operation(FailurePolicy.FATAL)
    async def total_impressions_and_clicks(self, start: date, end: date, site_url: str) -> dict[str, int]:
        rows = await self._query(site_url, start, end)
        row = rows[0] if rows else {}
        return {
            "impressions": round(row.get("impressions", 0) or 0),
            "clicks": round(row.get("clicks", 0) or 0),
        }

    @provider_operation(FailurePolicy.DEGRADE, default=DevicePosition(desktop=0.0, mobile=0.0))
    async def average_position(self, start: date, end: date, site_url: str) -> DevicePosition:
        desktop_rows, mobile_rows = await asyncio.gather(
            self._query(site_url, start, end, ["device"], device="DESKTOP"),
            self._query(site_url, start, end, ["device"], device="MOBILE"),
        )
        desktop = desktop_rows[0].get("position", 0) if desktop_rows else 0
        mobile = mobile_rows[0].get("position", 0) if mobile_rows else 0
        return DevicePosition(desktop=round(desktop, 2), mobile=round(mobile, 2))

    @provider_operation(FailurePolicy.DEGRADE, default=0.0)
    async def click_through_rate(self, start: date, end: date, site_url: str) -> float:
        """Site-wide CTR in percent, two decimals."""
        rows = await self._query(site_url, start, end)
        if not rows:
            return 0.0
        return self._row_stats(rows[0])["ctr"]

    @provider_operation(FailurePolicy.DEGRADE, default=[])
    async def top_queries(
        self, start: date, end: date, site_url: str, limit: Optional[int] = None
    ) -> list[SearchQuery]:
        rows = await self._query(site_url, start, end, ["query"], row_limit=limit or self._top_limit)
        return [
            SearchQuery(query=(row.get("keys") or ["Unknown"])[0], **self._row_stats(row))
            for row in rows
        ]

    @provider_operation(FailurePolicy.DEGRADE, default=[])
    async def top_search_pages(
        self, start: date, end: date, site_url: str, limit: Optional[int] = None
    ) -> list[SearchPage]:
        rows = await self._query(site_url, start, end, ["page"], row_limit=limit or self._top_limit)
        pages = []
        for row in rows:
            url = (row.get("keys") or ["Unknown"])[0]
            pages.append(SearchPage(page=page_title_from_url(url), url=url, **self._row_stats(row)))
        return pages

    @provider_operation(FailurePolicy.FATAL)
    async def indexed_pages(self, site_url: str) -> int:
        """Estimate indexed pages from web URLs submitted in downloaded sitemaps.

        The API has no index-coverage count; this is the closest figure
        it exposes.
        """
        request = self._service.sitemaps().list(siteUrl=site_url)
        response = await self._execute(request)
        total = 0
        for sitemap in response.get("sitemap", []):
            if not (sitemap.get("path") and sitemap.get("lastDownloaded")):
                continue
            for content in sitemap.get("contents", []):
                if content.get("type") == "web":
                    total += int(to_number(content.get("submitted")))
        return total
