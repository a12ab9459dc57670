"""Indicator rendering.

Rendering is a pure function of the metrics record, the applicant
threshold and the current time. The document adapter applies the
resulting view to the page.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from jobpulse.metrics.models import MetricsRecord


class BadgeStyle(Enum):
    """Visual style of a single badge."""

    BELOW_THRESHOLD = "below-threshold"
    ABOVE_THRESHOLD = "above-threshold"
    UNKNOWN = "unknown"
    NEUTRAL = "neutral"
    FRESH = "fresh"
    RECENT = "recent"
    STALE = "stale"
    NEW = "new"
    PENDING = "pending"
    UNAVAILABLE = "unavailable"


COMMON_STYLE = (
    "padding: 3px 8px; border-radius: 4px; display: inline-block; "
    "font-weight: 600; box-shadow: 0 1px 2px rgba(0,0,0,0.08);"
)

GREEN = "background-color: #e6f7e6; color: #006400; border: 1px solid #c3e6c3;"
RED = "background-color: #ffebeb; color: #cc0000; border: 1px solid #ffcccc;"
AMBER = "background-color: #fff8e1; color: #cc0000; border: 1px solid #ffcccc;"
BLUE = "background-color: #e8f0fe; color: #1a56db; border: 1px solid #b6d1fc;"
CYAN = "background-color: #e0f7fa; color: #006064; border: 1px solid #b2ebf2;"
GREY = "background-color: #f3f3f3; color: #555555; border: 1px solid #dddddd;"

BADGE_CSS = {
    BadgeStyle.BELOW_THRESHOLD: f"{COMMON_STYLE} {GREEN}",
    BadgeStyle.ABOVE_THRESHOLD: f"{COMMON_STYLE} {RED}",
    BadgeStyle.UNKNOWN: f"{COMMON_STYLE} {GREY}",
    BadgeStyle.NEUTRAL: f"{COMMON_STYLE} {BLUE}",
    BadgeStyle.FRESH: f"{COMMON_STYLE} {GREEN}",
    BadgeStyle.RECENT: f"{COMMON_STYLE} {AMBER}",
    BadgeStyle.STALE: f"{COMMON_STYLE} {RED}",
    BadgeStyle.NEW: f"{COMMON_STYLE} {CYAN}",
    BadgeStyle.PENDING: "",
    BadgeStyle.UNAVAILABLE: "",
}

CONTAINER_CSS = (
    "font-size: 13px; font-weight: 500; padding: 4px 0; display: flex; "
    "gap: 8px; flex-wrap: wrap; margin: 5px 0; line-height: 1.2;"
)
UNAVAILABLE_CSS = (
    "background-color: #999; color: white; padding: 2px 6px; border-radius: 3px;"
)

APPLICANT_SLOT = "applicant-count"
VIEW_SLOT = "view-count"
AGE_SLOT = "listing-date"

ONE_DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class Badge:
    """One text badge inside an indicator."""

    slot: Optional[str]
    text: str
    style: BadgeStyle

    @property
    def css(self) -> str:
        return BADGE_CSS[self.style]


@dataclass(frozen=True)
class IndicatorView:
    """Everything needed to draw an indicator element."""

    badges: tuple[Badge, ...]
    container_css: str = CONTAINER_CSS

    def badge(self, slot: str) -> Optional[Badge]:
        for badge in self.badges:
            if badge.slot == slot:
                return badge
        return None


def applicant_style(count: Optional[int], threshold: int) -> BadgeStyle:
    if count is None:
        return BadgeStyle.UNKNOWN
    return BadgeStyle.BELOW_THRESHOLD if count < threshold else BadgeStyle.ABOVE_THRESHOLD


def days_since(listed_at: datetime, now: datetime) -> int:
    """Whole days elapsed, rounded down."""
    if listed_at.tzinfo is None:
        listed_at = listed_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.floor((now - listed_at).total_seconds() / ONE_DAY_SECONDS)


def age_style(days_ago: int) -> BadgeStyle:
    if days_ago <= 1:
        return BadgeStyle.FRESH
    if days_ago <= 7:
        return BadgeStyle.RECENT
    return BadgeStyle.STALE


def build_indicator(
    record: MetricsRecord,
    threshold: int,
    now: Optional[datetime] = None,
) -> IndicatorView:
    """
    Build the indicator view for a metrics record.

    Args:
        record: Fetched metrics
        threshold: Applicant count below which the posting is highlighted green
        now: Reference time for the listing age (defaults to current UTC time)

    Returns:
        IndicatorView with applicant, view and age badges
    """
    now = now or datetime.now(timezone.utc)

    count = record.applicant_count
    applicants = Badge(
        APPLICANT_SLOT,
        f"{count if count is not None else '?'} applicants",
        applicant_style(count, threshold),
    )
    views = Badge(VIEW_SLOT, f"{record.view_count} views", BadgeStyle.NEUTRAL)

    if record.original_listed_at is not None:
        days_ago = days_since(record.original_listed_at, now)
        age = Badge(AGE_SLOT, f"{days_ago}d ago", age_style(days_ago))
    else:
        age = Badge(AGE_SLOT, "New", BadgeStyle.NEW)

    return IndicatorView(badges=(applicants, views, age))


def pending_view() -> IndicatorView:
    """Placeholder shown while metrics are being fetched."""
    return IndicatorView(
        badges=(
            Badge(APPLICANT_SLOT, "Fetching...", BadgeStyle.PENDING),
            Badge(VIEW_SLOT, "Fetching...", BadgeStyle.PENDING),
            Badge(AGE_SLOT, "Checking...", BadgeStyle.PENDING),
        )
    )


def failure_view() -> IndicatorView:
    """Single muted sentinel for a failed fetch."""
    return IndicatorView(
        badges=(Badge(None, "Details unavailable", BadgeStyle.UNAVAILABLE),),
        container_css=UNAVAILABLE_CSS,
    )
