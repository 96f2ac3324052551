"""Student risk classification.

Two policies coexist and feed different report fields:

- :func:`classify_student`: three tiers (good / at-risk / inactive) used for
  ``StudentAnalytics.status``, the school at-risk list and the overview's
  at-risk / inactive counts.
- :func:`is_course_at_risk`: a single ``< 80%`` cut used only for
  ``CoursePerformance.at_risk_students``.

They are intentionally not unified.
"""

from __future__ import annotations

import math

from models.analytics import StudentStatus

GOOD_THRESHOLD = 80
AT_RISK_THRESHOLD = 50
COURSE_AT_RISK_THRESHOLD = 80


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def submission_rate(submitted: int, total: int, empty: float = 0.0) -> float:
    """Unrounded percentage of ``submitted`` over ``total``, capped to [0, 100].

    ``empty`` is returned when ``total`` is zero; per-course views use 0,
    the school overview's per-student rate uses 100.
    """
    if total <= 0:
        return empty
    return min(100.0, max(0.0, submitted / total * 100))


def submission_percentage(submitted: int, total: int, empty: int = 0) -> int:
    """Whole-number form of :func:`submission_rate`."""
    if total <= 0:
        return empty
    return round_half_up(submission_rate(submitted, total))


def classify_student(percentage: float) -> StudentStatus:
    """Three-tier status; 80 and 50 are inclusive lower bounds."""
    if percentage >= GOOD_THRESHOLD:
        return StudentStatus.GOOD
    if percentage >= AT_RISK_THRESHOLD:
        return StudentStatus.AT_RISK
    return StudentStatus.INACTIVE


def is_course_at_risk(percentage: float) -> bool:
    """Per-course at-risk cut used by course performance rows."""
    return percentage < COURSE_AT_RISK_THRESHOLD
