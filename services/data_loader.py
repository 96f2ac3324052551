"""Fan-out / fan-in fetch stage feeding the aggregators.

For each course the loader fetches coursework, students and teachers
concurrently, then every CourseWork's submissions concurrently. Courses are
loaded in parallel under an ``asyncio.Semaphore``. Every task writes only its
own slot, and aggregation starts only after all of them have joined.

Failure policy:
- a failed roster, coursework or submissions call becomes an empty list;
- a course whose loading fails outright is dropped from the result;
- nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from adapters.classroom_adapter import (
    list_course_work,
    list_students,
    list_submissions,
    list_teachers,
)
from config.settings import get_settings
from models.classroom import Course, CourseBundle
from services.classroom_client import ClassroomClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _or_empty(call: Awaitable[list[T]], what: str) -> list[T]:
    """Await a list-returning call; substitute ``[]`` when it fails."""
    try:
        return await call
    except Exception:
        logger.warning("%s unavailable, continuing with an empty list", what, exc_info=True)
        return []


async def load_course_bundle(
    client: ClassroomClient, token: str, course: Course
) -> CourseBundle:
    """Fetch everything needed to aggregate one course."""
    course_work, students, teachers = await asyncio.gather(
        _or_empty(list_course_work(client, token, course.id), f"courseWork of course {course.id}"),
        _or_empty(list_students(client, token, course.id), f"students of course {course.id}"),
        _or_empty(list_teachers(client, token, course.id), f"teachers of course {course.id}"),
    )

    submission_lists = await asyncio.gather(*(
        _or_empty(
            list_submissions(client, token, course.id, work.id),
            f"submissions of courseWork {work.id} (course {course.id})",
        )
        for work in course_work
    ))

    return CourseBundle(
        course=course,
        course_work=course_work,
        students=students,
        teachers=teachers,
        submissions_by_work={
            work.id: submissions for work, submissions in zip(course_work, submission_lists)
        },
    )


async def load_course_bundles(
    client: ClassroomClient,
    token: str,
    courses: list[Course],
    max_concurrency: int | None = None,
) -> list[CourseBundle]:
    """Load several courses in parallel, keeping the input order."""
    limit = max_concurrency or get_settings().classroom_max_concurrency
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _load(course: Course) -> CourseBundle | None:
        async with semaphore:
            try:
                return await load_course_bundle(client, token, course)
            except Exception:
                logger.warning("Failed to load data for course %s", course.id, exc_info=True)
                return None

    results = await asyncio.gather(*(_load(course) for course in courses))
    bundles = [bundle for bundle in results if bundle is not None]
    logger.info("Loaded %d/%d courses", len(bundles), len(courses))
    return bundles
