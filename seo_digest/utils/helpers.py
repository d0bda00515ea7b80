"""General-purpose helper utilities for metric comparison and display."""

from typing import Any, Callable, Iterable, TypeVar
from urllib.parse import urlparse

T = TypeVar("T")


def percentage_change(current: float, previous: float) -> float:
    """Percentage change from *previous* to *current*.

    Every comparison in a report goes through this function.

    Examples:
        >>> percentage_change(0, 0)
        0.0
        >>> percentage_change(5, 0)
        100.0
        >>> percentage_change(150, 100)
        50.0
    """
    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return (current - previous) / previous * 100


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division returning *default* when denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def rank_top(
    items: Iterable[T],
    key: Callable[[T], float],
    limit: int = 10,
) -> list[T]:
    """Return the *limit* largest items by *key*, descending.

    Ties keep the order in which the provider returned them.
    """
    return sorted(items, key=key, reverse=True)[:limit]


def with_shares(
    rows: list[dict[str, Any]],
    value_key: str,
    limit: int = 10,
) -> list[dict[str, Any]]:
    """Rank *rows* by *value_key* and attach each row's percentage of the listed total.

    Rows cut by *limit* do not count towards the total.
    """
    ranked = rank_top(rows, key=lambda row: row[value_key], limit=limit)
    total = sum(row[value_key] for row in ranked)
    return [
        {**row, "pct": round(safe_div(row[value_key], total) * 100, 2)}
        for row in ranked
    ]


def to_number(value: Any) -> float:
    """Parse an API metric value (often a string) into a number."""
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0


def format_int(value: float) -> str:
    """Format a count with thousands separators (``1234`` -> ``'1,234'``)."""
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.2f}"
    return f"{int(value):,}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as ``'2m 05s'``."""
    total = int(round(seconds))
    minutes, secs = divmod(total, 60)
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def page_title_from_url(url: str) -> str:
    """Derive a readable page name from the last segment of a URL path.

    Examples:
        >>> page_title_from_url("https://example.com/")
        'Main Page'
        >>> page_title_from_url("https://example.com/blog/best-seo_tools")
        'Best Seo Tools'
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url
    path = parsed.path
    if path in ("", "/"):
        return "Main Page"
    segments = [s for s in path.split("/") if s]
    last = segments[-1].replace("-", " ").replace("_", " ")
    return " ".join(word[:1].upper() + word[1:] for word in last.split())


def extract_domain(url: str) -> str:
    """Extract the domain from a URL.

    Args:
        url: Full URL string.

    Returns:
        Domain name without protocol or path.
    """
    parsed = urlparse(url if "://" in url else f"https://{url}")
    return (parsed.hostname or "").lower()

