"""Input validation utilities for URLs, domains, and report requests."""

import re
from typing import Any
from urllib.parse import urlparse

REPORT_TYPES = ("summary", "detailed")


def validate_url(url: str) -> tuple[bool, str]:
    """Validate a URL string.

    Args:
        url: The URL to validate.

    Returns:
        Tuple of (is_valid, error_message).  error_message is empty on success.
    """
    if not url or not isinstance(url, str):
        return False, "URL is empty or not a string."
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        return False, f"URL parse error: {exc}"
    if parsed.scheme not in ("http", "https"):
        return False, f"Invalid scheme: {parsed.scheme!r}. Must be http or https."
    if not parsed.netloc:
        return False, "URL has no network location (domain)."
    hostname = parsed.hostname or ""
    if not hostname or len(hostname) > 253:
        return False, "Invalid hostname length."
    return True, ""


def validate_domain(domain: str) -> tuple[bool, str]:
    """Validate a domain name.

    Args:
        domain: The domain name to validate.  May include protocol prefix.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not domain or not isinstance(domain, str):
        return False, "Domain is empty or not a string."
    domain = domain.strip().lower()
    if "://" in domain:
        domain = domain.split("://", 1)[1]
    domain = domain.split("/")[0]
    domain = domain.split(":")[0]
    if len(domain) > 253:
        return False, "Domain exceeds maximum length (253 chars)."
    if "." not in domain:
        return False, "Domain must contain at least one dot."
    for label in domain.split("."):
        if not label:
            return False, "Domain contains empty label (double dot)."
        if len(label) > 63:
            return False, f"Label '{label}' exceeds 63 chars."
        if not re.match(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$", label):
            return False, f"Label '{label}' contains invalid characters."
    return True, ""


def validate_gsc_site(site_url: str) -> tuple[bool, str]:
    """Validate a Search Console property (URL-prefix or ``sc-domain:``)."""
    if not site_url or not isinstance(site_url, str):
        return False, "Search Console site is empty or not a string."
    if site_url.startswith("sc-domain:"):
        return validate_domain(site_url[len("sc-domain:"):])
    return validate_url(site_url)


def validate_ga_property(property_id: str) -> tuple[bool, str]:
    """Validate a GA4 property id (``123456789`` or ``properties/123456789``)."""
    if not property_id or not isinstance(property_id, str):
        return False, "Analytics property id is empty or not a string."
    value = property_id.strip()
    if value.startswith("properties/"):
        value = value.split("/", 1)[1]
    if not value.isdigit():
        return False, f"Analytics property id {property_id!r} must be numeric."
    return True, ""


def validate_report_type(report_type: Any) -> tuple[bool, str]:
    if report_type not in REPORT_TYPES:
        return False, f"Invalid report type {report_type!r}. Must be one of: {', '.join(REPORT_TYPES)}."
    return True, ""
