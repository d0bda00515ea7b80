"""Threshold rules that turn detailed metrics into strategic problem statements."""

from seo_digest.models import DetailedMetrics
from seo_digest.modules.reporting.periods import SEARCH_WINDOW_DAYS

POSITION_THRESHOLD = 80.0
CTR_THRESHOLD = 2.0
IMPRESSIONS_THRESHOLD = 1000


def position_breached(average_position: float) -> bool:
    return average_position > POSITION_THRESHOLD


def ctr_breached(ctr: float) -> bool:
    return ctr < CTR_THRESHOLD


def retention_breached(day7: float) -> bool:
    return day7 == 0


def impressions_breached(impressions: int) -> bool:
    return impressions < IMPRESSIONS_THRESHOLD


def detect_problems(metrics: DetailedMetrics, search_days: int = SEARCH_WINDOW_DAYS) -> list[str]:
    """Return one sentence per breached rule, always in the same rule order.

    Rules are independent: any subset of them can fire.  *search_days* is
    the length of the window the search metrics cover.
    """
    search = metrics.search
    problems: list[str] = []

    avg_position = search.position.average
    if position_breached(avg_position):
        problems.append(
            f"Average search position is {avg_position:.1f} (desktop {search.position.desktop:.1f}, "
            f"mobile {search.position.mobile:.1f}); pages beyond position {POSITION_THRESHOLD:.0f} "
            "receive almost no clicks, which keeps click-through rate low. "
            "Prioritise on-page optimisation for the queries already earning impressions."
        )

    if ctr_breached(search.ctr):
        problems.append(
            f"Click-through rate is {search.ctr:.2f}%, below the {CTR_THRESHOLD:.0f}% floor. "
            "Rewrite titles and meta descriptions for the most-impressed pages."
        )

    if retention_breached(metrics.traffic.retention.day7):
        problems.append(
            "7-day retention is 0%: no new visitors returned within a week. "
            "Add reasons to come back (newsletter, fresh content, account features)."
        )

    if impressions_breached(search.impressions):
        problems.append(
            f"Only {search.impressions:,} search impressions in the last {search_days} days "
            f"(under {IMPRESSIONS_THRESHOLD:,}); the site is barely visible in search. "
            "Check indexing and publish content targeting reachable queries."
        )

    return problems
