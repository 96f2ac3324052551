"""Analytics entry points: fetch a snapshot, then aggregate it.

Each function takes the shared :class:`ClassroomClient` and the caller's
access token explicitly. Only the top-level fetch (the course list, or the
single course of a course view) is allowed to fail the whole call; it is
re-raised as :class:`ProviderFetchError`.
"""

from __future__ import annotations

import logging
from datetime import datetime

from adapters.classroom_adapter import get_course, list_courses
from errors import ProviderFetchError
from models.analytics import CourseAnalytics, SchoolAnalytics, StudentDetail, TeacherDetail
from models.classroom import Course, CourseBundle, CourseState
from services.classroom_client import ClassroomClient, ClassroomClientError
from services.course_analytics import aggregate_course_analytics, compute_course_analytics
from services.data_loader import load_course_bundle, load_course_bundles
from services.person_analytics import compute_student_detail, compute_teacher_detail
from services.school_analytics import compute_school_analytics

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Top-level fetches
# ---------------------------------------------------------------------------

async def get_teacher_courses(client: ClassroomClient, token: str) -> list[Course]:
    """Courses the caller teaches, in any state."""
    try:
        return await list_courses(client, token, teacher_id="me")
    except ClassroomClientError as exc:
        raise ProviderFetchError("course list", exc.detail, exc.status_code) from exc


async def get_active_courses(client: ClassroomClient, token: str) -> list[Course]:
    """Every active course visible to the caller."""
    try:
        courses = await list_courses(client, token, course_states=[CourseState.ACTIVE])
    except ClassroomClientError as exc:
        raise ProviderFetchError("course list", exc.detail, exc.status_code) from exc
    # The API filter is advisory for some account types.
    return [c for c in courses if c.is_active]


async def _load_active_bundles(client: ClassroomClient, token: str) -> list[CourseBundle]:
    courses = await get_active_courses(client, token)
    return await load_course_bundles(client, token, courses)


# ---------------------------------------------------------------------------
# Teacher views
# ---------------------------------------------------------------------------

async def get_course_analytics(
    client: ClassroomClient,
    token: str,
    course_id: str,
    now: datetime | None = None,
) -> CourseAnalytics:
    try:
        course = await get_course(client, token, course_id)
    except ClassroomClientError as exc:
        raise ProviderFetchError(f"course {course_id}", exc.detail, exc.status_code) from exc
    bundle = await load_course_bundle(client, token, course)
    return compute_course_analytics(bundle, now)


async def get_aggregated_analytics(
    client: ClassroomClient,
    token: str,
    now: datetime | None = None,
) -> CourseAnalytics | None:
    """All of the caller's courses merged; ``None`` when there is nothing to show."""
    courses = await get_teacher_courses(client, token)
    if not courses:
        return None

    bundles = await load_course_bundles(client, token, courses)
    if not bundles:
        logger.warning("No course data could be loaded for %d courses", len(courses))
        return None
    return aggregate_course_analytics([compute_course_analytics(b, now) for b in bundles])


# ---------------------------------------------------------------------------
# School / admin views
# ---------------------------------------------------------------------------

async def get_school_analytics(
    client: ClassroomClient,
    token: str,
    now: datetime | None = None,
) -> SchoolAnalytics:
    bundles = await _load_active_bundles(client, token)
    return compute_school_analytics(bundles, now)


async def get_student_detail(client: ClassroomClient, token: str, student_id: str) -> StudentDetail:
    bundles = await _load_active_bundles(client, token)
    return compute_student_detail(bundles, student_id)


async def get_teacher_detail(client: ClassroomClient, token: str, teacher_id: str) -> TeacherDetail:
    bundles = await _load_active_bundles(client, token)
    return compute_teacher_detail(bundles, teacher_id)
