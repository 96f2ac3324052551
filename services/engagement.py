"""Engagement time series and timestamp helpers.

The engagement series is a dense, zero-filled window of the last
``ENGAGEMENT_WINDOW_DAYS`` local calendar days (oldest first, today last).
Each submitted-state event with a parseable ``update_time`` adds one to the
day it falls on; events outside the window are ignored.

Timestamps arrive from Classroom as RFC 3339 strings. A value that cannot be
parsed is logged at DEBUG and treated as absent, never raised.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Iterable

from models.analytics import EngagementDataPoint
from models.classroom import Submission

logger = logging.getLogger(__name__)

ENGAGEMENT_WINDOW_DAYS = 30

# fromisoformat keeps at most microseconds; Classroom may send nanoseconds.
_EXTRA_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------

def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp into aware local time.

    Returns ``None`` when the value is malformed or cannot be expressed in
    local time (dates at the very edge of the calendar).
    """
    if not value or not isinstance(value, str):
        return None
    text = _EXTRA_FRACTION_RE.sub(r"\1", value.strip())
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        # naive values are read as local time
        return datetime.fromisoformat(text).astimezone()
    except (ValueError, OverflowError, OSError):
        logger.debug("Skipping unparseable timestamp %r", value)
        return None


def to_local(moment: datetime) -> datetime:
    """Express an aware datetime in local time; naive values are already local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone()


def local_date(value: str | None) -> date | None:
    """Local calendar date of a timestamp string."""
    moment = parse_timestamp(value)
    return moment.date() if moment else None


def local_today(now: datetime | None = None) -> date:
    return to_local(now or datetime.now()).date()


def display_date(day: date) -> str:
    """``Mar 4, 2025``"""
    return f"{day:%b} {day.day}, {day.year}"


def short_display_date(day: date) -> str:
    """``Mar 4``"""
    return f"{day:%b} {day.day}"


def format_display_date(value: str | None) -> str | None:
    """Render a timestamp string as a local display date, or ``None``."""
    day = local_date(value)
    return display_date(day) if day else None


def latest_timestamp(values: Iterable[str | None]) -> str | None:
    """Return the raw value of the newest parseable timestamp."""
    latest_raw: str | None = None
    latest_key: float | None = None
    for raw in values:
        moment = parse_timestamp(raw)
        if moment is None:
            continue
        key = moment.timestamp()
        if latest_key is None or key > latest_key:
            latest_raw, latest_key = raw, key
    return latest_raw


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------

def empty_series(today: date) -> dict[date, int]:
    """Zero-filled counters for the trailing window ending on ``today``."""
    start = today - timedelta(days=ENGAGEMENT_WINDOW_DAYS - 1)
    return {start + timedelta(days=i): 0 for i in range(ENGAGEMENT_WINDOW_DAYS)}


def _to_points(counts: dict[date, int]) -> list[EngagementDataPoint]:
    return [
        EngagementDataPoint(
            date=day.isoformat(),
            submissions=count,
            formatted_date=short_display_date(day),
        )
        for day, count in sorted(counts.items())
    ]


def build_engagement_series(
    submissions: Iterable[Submission],
    now: datetime | None = None,
) -> list[EngagementDataPoint]:
    """Count submitted events per local day over the trailing window."""
    counts = empty_series(local_today(now))
    for sub in submissions:
        if not sub.is_submitted or not sub.update_time:
            continue
        day = local_date(sub.update_time)
        if day in counts:
            counts[day] += 1
    return _to_points(counts)


def merge_engagement_series(
    series_list: Iterable[list[EngagementDataPoint]],
) -> list[EngagementDataPoint]:
    """Sum several series by date, keeping chronological order."""
    totals: dict[str, int] = {}
    labels: dict[str, str] = {}
    for series in series_list:
        for point in series:
            totals[point.date] = totals.get(point.date, 0) + point.submissions
            labels.setdefault(point.date, point.formatted_date)
    return [
        EngagementDataPoint(date=day, submissions=totals[day], formatted_date=labels[day])
        for day in sorted(totals)
    ]
