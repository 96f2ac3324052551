"""Adapter for Google Classroom REST APIs → internal entity models.

Classroom API endpoints handled:
- GET /courses                                                    → list[Course]
- GET /courses/{courseId}                                         → Course
- GET /courses/{courseId}/courseWork                              → list[CourseWork]
- GET /courses/{courseId}/students                                → list[Person]
- GET /courses/{courseId}/teachers                                → list[Person]
- GET /courses/{courseId}/courseWork/{courseWorkId}/studentSubmissions → list[Submission]

Every call raises :class:`ClassroomClientError` on failure; deciding whether
a failure is fatal belongs to ``services/data_loader.py``.
"""

from __future__ import annotations

from typing import Any, Iterable

from models.classroom import (
    Course,
    CourseState,
    CourseWork,
    DueDate,
    Person,
    Submission,
    SubmissionState,
)
from services.classroom_client import ClassroomClient


# ---------------------------------------------------------------------------
# Response → Internal Model conversions
# ---------------------------------------------------------------------------

def _string_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _float_or_none(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _enum_or_default(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _parse_course(raw: dict[str, Any]) -> Course:
    """Convert a Classroom ``Course`` resource to :class:`Course`."""
    return Course(
        id=str(raw.get("id", "")),
        name=raw.get("name") or "",
        course_state=_enum_or_default(CourseState, raw.get("courseState"), CourseState.UNSPECIFIED),
        section=_string_or_none(raw.get("section")),
    )


def _parse_person(raw: dict[str, Any]) -> Person:
    """Convert a Classroom ``Student`` or ``Teacher`` resource to :class:`Person`."""
    profile = raw.get("profile") or {}
    name = (profile.get("name") or {}).get("fullName")
    return Person(
        user_id=str(raw.get("userId") or profile.get("id") or ""),
        name=_string_or_none(name),
        email=_string_or_none(profile.get("emailAddress")),
        photo_url=_string_or_none(profile.get("photoUrl")),
    )


def _parse_due_date(raw: Any) -> DueDate | None:
    if not isinstance(raw, dict):
        return None
    year, month, day = raw.get("year"), raw.get("month"), raw.get("day")
    if not (year and month and day):
        return None
    try:
        return DueDate(year=int(year), month=int(month), day=int(day))
    except (TypeError, ValueError):
        return None


def _parse_course_work(raw: dict[str, Any]) -> CourseWork:
    """Convert a Classroom ``CourseWork`` resource to :class:`CourseWork`."""
    return CourseWork(
        id=str(raw.get("id", "")),
        course_id=str(raw.get("courseId", "")),
        title=raw.get("title") or "",
        due_date=_parse_due_date(raw.get("dueDate")),
        max_points=_float_or_none(raw.get("maxPoints")),
    )


def _parse_submission(raw: dict[str, Any]) -> Submission:
    """Convert a Classroom ``StudentSubmission`` resource to :class:`Submission`."""
    return Submission(
        course_work_id=str(raw.get("courseWorkId", "")),
        user_id=str(raw.get("userId", "")),
        state=_enum_or_default(SubmissionState, raw.get("state"), SubmissionState.UNSPECIFIED),
        late=bool(raw.get("late", False)),
        update_time=_string_or_none(raw.get("updateTime")),
        assigned_grade=_float_or_none(raw.get("assignedGrade")),
    )


# ---------------------------------------------------------------------------
# High-level API calls (through ClassroomClient)
# ---------------------------------------------------------------------------

async def list_courses(
    client: ClassroomClient,
    token: str,
    teacher_id: str | None = None,
    course_states: Iterable[CourseState] | None = None,
) -> list[Course]:
    """Fetch all courses visible to the caller.

    GET /courses

    ``teacher_id="me"`` restricts the list to courses the caller teaches.
    """
    params: dict[str, Any] = {}
    if teacher_id:
        params["teacherId"] = teacher_id
    if course_states:
        params["courseStates"] = [s.value for s in course_states]
    items = await client.get_paginated("/courses", token, "courses", params=params)
    return [_parse_course(c) for c in items]


async def get_course(client: ClassroomClient, token: str, course_id: str) -> Course:
    """Fetch a single course.

    GET /courses/{courseId}
    """
    raw = await client.get(f"/courses/{course_id}", token)
    return _parse_course(raw or {"id": course_id})


async def list_course_work(client: ClassroomClient, token: str, course_id: str) -> list[CourseWork]:
    """GET /courses/{courseId}/courseWork"""
    items = await client.get_paginated(f"/courses/{course_id}/courseWork", token, "courseWork")
    return [_parse_course_work({"courseId": course_id, **w}) for w in items]


async def list_students(client: ClassroomClient, token: str, course_id: str) -> list[Person]:
    """GET /courses/{courseId}/students"""
    items = await client.get_paginated(f"/courses/{course_id}/students", token, "students")
    return [_parse_person(s) for s in items]


async def list_teachers(client: ClassroomClient, token: str, course_id: str) -> list[Person]:
    """GET /courses/{courseId}/teachers"""
    items = await client.get_paginated(f"/courses/{course_id}/teachers", token, "teachers")
    return [_parse_person(t) for t in items]


async def list_submissions(
    client: ClassroomClient, token: str, course_id: str, course_work_id: str
) -> list[Submission]:
    """GET /courses/{courseId}/courseWork/{courseWorkId}/studentSubmissions"""
    items = await client.get_paginated(
        f"/courses/{course_id}/courseWork/{course_work_id}/studentSubmissions",
        token,
        "studentSubmissions",
    )
    return [_parse_submission({"courseWorkId": course_work_id, **s}) for s in items]
