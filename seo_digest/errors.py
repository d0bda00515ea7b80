"""Exception taxonomy for report generation.

Configuration and request errors are raised before any provider is
contacted.  Provider errors are fatal to the project whose build raised
them.  ``DegradedMetricError`` is never raised; it is built and logged
when a secondary metric falls back to its documented default.
"""

from typing import Any, Optional

import aiohttp
from google.api_core import exceptions as google_exceptions
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError


class SEODigestError(Exception):
    """Base exception for SEO Digest."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class ConfigurationError(SEODigestError):
    """Missing credentials or required settings."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        details = {"missing": missing} if missing else {}
        super().__init__(message=message, code="configuration_error", details=details)


class RequestValidationError(SEODigestError):
    """Report request payload rejected before any provider call."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, code="validation_error", details=details)


class ProviderError(SEODigestError):
    """A provider call failed in a way that aborts the project's report."""

    default_remediation = "Check the provider configuration and try again."

    def __init__(
        self,
        provider: str,
        message: str,
        remediation: Optional[str] = None,
        code: str = "provider_error",
    ):
        self.provider = provider
        self.remediation = remediation or self.default_remediation
        super().__init__(
            message=f"Failed to fetch {provider} data: {message}. {self.remediation}",
            code=code,
            details={"provider": provider},
        )


class ProviderAuthError(ProviderError):
    """The provider rejected the credentials or the account lacks access."""

    default_remediation = (
        "Please verify the service account credentials are correctly formatted "
        "and that the account has been granted access to this property."
    )

    def __init__(self, provider: str, message: str, remediation: Optional[str] = None):
        super().__init__(provider, message, remediation, code="provider_auth_error")


class ProviderUnavailableError(ProviderError):
    """The provider API is not enabled, over quota, or unreachable."""

    default_remediation = (
        "Please verify the API is enabled for the Google Cloud project "
        "and try again later."
    )

    def __init__(self, provider: str, message: str, remediation: Optional[str] = None):
        super().__init__(provider, message, remediation, code="provider_unavailable")


class DegradedMetricError(SEODigestError):
    """A non-fatal metric fell back to its default value."""

    def __init__(self, provider: str, operation: str, cause: BaseException):
        self.provider = provider
        self.operation = operation
        self.cause = cause
        super().__init__(
            message=f"{provider}.{operation} degraded to default: {cause}",
            code="degraded_metric",
            details={"provider": provider, "operation": operation},
        )


_API_DISABLED_MARKERS = ("accessNotConfigured", "SERVICE_DISABLED", "has not been used", "is disabled")


def classify_provider_error(provider: str, exc: BaseException) -> ProviderError:
    """Map a low-level client exception onto the provider error taxonomy."""
    if isinstance(exc, ProviderError):
        return exc
    text = str(exc)

    if isinstance(exc, RefreshError):
        return ProviderAuthError(provider, f"credential refresh failed ({text})")

    if isinstance(exc, google_exceptions.GoogleAPICallError):
        if any(marker in text for marker in _API_DISABLED_MARKERS):
            return ProviderUnavailableError(provider, f"API not enabled ({text})")
        if isinstance(exc, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
            return ProviderAuthError(provider, text)
        return ProviderUnavailableError(provider, text)

    if isinstance(exc, HttpError):
        status = exc.resp.status if exc.resp is not None else 0
        if any(marker in text for marker in _API_DISABLED_MARKERS):
            return ProviderUnavailableError(provider, f"API not enabled ({text})")
        if status in (401, 403):
            return ProviderAuthError(provider, f"HTTP {status}")
        return ProviderUnavailableError(provider, f"HTTP {status}")

    if isinstance(exc, aiohttp.ClientResponseError):
        status = exc.status
        if status in (401, 403):
            return ProviderAuthError(
                provider,
                f"HTTP {status}",
                remediation="Please verify the API token is valid and has sufficient access.",
            )
        return ProviderUnavailableError(provider, f"HTTP {status}")

    if isinstance(exc, ValueError) and "private key" in text.lower():
        return ProviderAuthError(provider, f"invalid private key ({text})")

    return ProviderUnavailableError(provider, text or exc.__class__.__name__)
