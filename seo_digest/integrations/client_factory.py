"""Construct-once provider handles shared by every project build."""

import logging
from typing import Optional

from google.analytics.data_v1beta import BetaAnalyticsDataAsyncClient
from google.oauth2 import service_account

from seo_digest.config import ReportSettings
from seo_digest.errors import ConfigurationError
from seo_digest.integrations.ahrefs import AhrefsProvider
from seo_digest.integrations.google_analytics import GA4_SCOPES, GoogleAnalyticsProvider
from seo_digest.integrations.google_search_console import (
    GSC_SCOPES,
    SearchConsoleProvider,
    build_service,
)
from seo_digest.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class ProviderClientFactory:
    """Create each provider once and hand the same instance to every build.

    Credentials are read when the factory is built and never change
    afterwards, so the handles are safe to reuse across concurrent
    project builds.

    Usage::

        factory = ProviderClientFactory(load_settings())
        builder = ProjectReportBuilder(factory)
        ...
        await factory.aclose()
    """

    def __init__(self, settings: ReportSettings):
        if not settings.google.configured:
            raise ConfigurationError(
                "Missing Google service account credentials: set GOOGLE_CLIENT_EMAIL "
                "and GOOGLE_PRIVATE_KEY, or GOOGLE_APPLICATION_CREDENTIALS.",
                missing=["GOOGLE_CLIENT_EMAIL", "GOOGLE_PRIVATE_KEY"],
            )
        self._settings = settings
        self._credentials: Optional[service_account.Credentials] = None
        self._analytics: Optional[GoogleAnalyticsProvider] = None
        self._search_console: Optional[SearchConsoleProvider] = None
        self._ahrefs: Optional[AhrefsProvider] = None

    @property
    def settings(self) -> ReportSettings:
        return self._settings

    def _google_credentials(self) -> service_account.Credentials:
        if self._credentials is None:
            google = self._settings.google
            try:
                if google.credentials_path:
                    self._credentials = service_account.Credentials.from_service_account_file(
                        google.credentials_path
                    )
                else:
                    self._credentials = service_account.Credentials.from_service_account_info(
                        google.service_account_info()
                    )
            except (ValueError, OSError) as exc:
                raise ConfigurationError(
                    f"Invalid Google service account credentials: {exc}. "
                    "Check the private key format (PEM, newlines escaped as \\n)."
                ) from exc
            logger.info("Loaded service account %s", self._credentials.service_account_email)
        return self._credentials

    def analytics(self) -> GoogleAnalyticsProvider:
        if self._analytics is None:
            credentials = self._google_credentials().with_scopes(GA4_SCOPES)
            self._analytics = GoogleAnalyticsProvider(
                BetaAnalyticsDataAsyncClient(credentials=credentials),
                limiter=RateLimiter(self._settings.analytics_rpm, name="google_analytics"),
                top_limit=self._settings.top_limit,
            )
            logger.info("Google Analytics client created")
        return self._analytics

    def search_console(self) -> SearchConsoleProvider:
        if self._search_console is None:
            credentials = self._google_credentials().with_scopes(GSC_SCOPES)
            self._search_console = SearchConsoleProvider(
                build_service(credentials),
                credentials,
                limiter=RateLimiter(self._settings.search_console_rpm, name="search_console"),
                top_limit=self._settings.top_limit,
            )
            logger.info("Search Console client created")
        return self._search_console

    def domain_authority(self) -> Optional[AhrefsProvider]:
        """The Ahrefs provider, or ``None`` when no token is configured."""
        if not self._settings.ahrefs_api_token:
            return None
        if self._ahrefs is None:
            self._ahrefs = AhrefsProvider(
                self._settings.ahrefs_api_token,
                timeout=self._settings.ahrefs_timeout,
                limiter=RateLimiter(self._settings.ahrefs_rpm, name="ahrefs"),
            )
        return self._ahrefs

    async def aclose(self) -> None:
        if self._analytics is not None:
            await self._analytics.close()
        if self._ahrefs is not None:
            await self._ahrefs.close()
