"""Internal entity models for Google Classroom data.

These models decouple the aggregation code from the Classroom REST payloads.
``adapters/classroom_adapter.py`` converts raw API JSON into these types;
nothing downstream ever mutates them.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import Field

from models.base import CamelModel


class CourseState(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    PROVISIONED = "PROVISIONED"
    DECLINED = "DECLINED"
    SUSPENDED = "SUSPENDED"
    UNSPECIFIED = "COURSE_STATE_UNSPECIFIED"


class SubmissionState(str, Enum):
    NEW = "NEW"
    CREATED = "CREATED"
    TURNED_IN = "TURNED_IN"
    RETURNED = "RETURNED"
    RECLAIMED_BY_STUDENT = "RECLAIMED_BY_STUDENT"
    UNSPECIFIED = "SUBMISSION_STATE_UNSPECIFIED"
    # Never sent by the API; stands in for a student with no record at all.
    NOT_SUBMITTED = "NOT_SUBMITTED"


SUBMITTED_STATES = frozenset({SubmissionState.TURNED_IN, SubmissionState.RETURNED})
PENDING_STATES = frozenset({
    SubmissionState.NEW,
    SubmissionState.CREATED,
    SubmissionState.NOT_SUBMITTED,
})


class _Entity(CamelModel):
    """Immutable provider entity; accepts snake_case names, dumps camelCase."""


class Course(_Entity):
    """A Classroom course."""
    id: str
    name: str
    course_state: CourseState = CourseState.UNSPECIFIED
    section: str | None = None

    @property
    def is_active(self) -> bool:
        return self.course_state == CourseState.ACTIVE


class Person(_Entity):
    """A teacher or student on a course roster.

    ``name`` is ``None`` when the profile is hidden from the caller; display
    fallbacks differ between views, so they are applied by the aggregators.
    """
    user_id: str
    name: str | None = None
    email: str | None = None
    photo_url: str | None = None

    def display_name(self, fallback: str = "Unknown") -> str:
        return self.name or fallback


class DueDate(_Entity):
    """Calendar due date with no time component."""
    year: int
    month: int
    day: int

    def to_date(self) -> date | None:
        try:
            return date(self.year, self.month, self.day)
        except ValueError:
            return None


class CourseWork(_Entity):
    """An assignment belonging to exactly one course."""
    id: str
    course_id: str = ""
    title: str = ""
    due_date: DueDate | None = None
    max_points: float | None = None


class Submission(_Entity):
    """One student's record for one CourseWork.

    ``update_time`` is kept as the raw RFC 3339 string; parsing happens where
    it is needed so a malformed value only drops that event from
    date-based figures.
    """
    course_work_id: str = ""
    user_id: str
    state: SubmissionState = SubmissionState.UNSPECIFIED
    late: bool = False
    update_time: str | None = None
    assigned_grade: float | None = None

    @property
    def is_submitted(self) -> bool:
        return self.state in SUBMITTED_STATES

    @property
    def is_pending(self) -> bool:
        return self.state in PENDING_STATES


class CourseBundle(_Entity):
    """Everything fetched for one course, ready for aggregation."""
    course: Course
    course_work: list[CourseWork] = Field(default_factory=list)
    students: list[Person] = Field(default_factory=list)
    teachers: list[Person] = Field(default_factory=list)
    submissions_by_work: dict[str, list[Submission]] = Field(default_factory=dict)

    def submissions_for(self, course_work_id: str) -> list[Submission]:
        return self.submissions_by_work.get(course_work_id, [])
