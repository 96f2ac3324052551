"""Shared pytest fixtures for analytics tests.

Provides:
- ``now``: a fixed local "current time" so due-date and engagement-window
  results are deterministic
- ``two_student_bundle``: a small course used by several aggregator tests

Snapshot builders live in ``tests/factories.py``.
"""

from datetime import datetime

import pytest

from models.classroom import CourseBundle
from tests.factories import NOW, bundle, course, person, sub, ts, work


@pytest.fixture
def now() -> datetime:
    """Fixed local aggregation time: 2025-03-15 12:00."""
    return NOW


@pytest.fixture
def two_student_bundle() -> CourseBundle:
    """2 students, 2 undated assignments; A submits both (one late), B nothing."""
    return bundle(
        course("c-1", "Algebra"),
        [work("w-1"), work("w-2")],
        [person("s-a", "Alice"), person("s-b", "Bob")],
        teachers=[person("t-1", "Ms. Lee", email="lee@school.test")],
        submissions=[
            sub("s-a", "w-1", update_time=ts(2025, 3, 10)),
            sub("s-a", "w-2", late=True, update_time=ts(2025, 3, 12)),
        ],
    )
