"""Derived analytics records: the output contract of the aggregation layer.

All records are immutable and rebuilt from scratch on every aggregation run.
They serialize with camelCase keys (``submissionPercentage``, ``userId``...)
for dashboard and export consumers.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import AfterValidator, Field, NonNegativeInt

from models.base import CamelModel


def _clamp_percentage(value: float) -> float:
    return min(100.0, max(0.0, value))


def _clamp_whole_percentage(value: int) -> int:
    return min(100, max(0, value))


# Rates may be fractional (assignment rows); percentages shown per person are whole numbers.
Rate = Annotated[float, AfterValidator(_clamp_percentage)]
Percentage = Annotated[int, AfterValidator(_clamp_whole_percentage)]


class StudentStatus(str, Enum):
    GOOD = "good"
    AT_RISK = "at-risk"
    INACTIVE = "inactive"


# ---------------------------------------------------------------------------
# Per-course analytics
# ---------------------------------------------------------------------------

class AnalyticsSummary(CamelModel):
    total_students: NonNegativeInt = 0
    total_assignments: NonNegativeInt = 0
    total_submissions: NonNegativeInt = 0
    late_submissions: NonNegativeInt = 0
    missing_submissions: NonNegativeInt = 0


class EngagementDataPoint(CamelModel):
    date: str  # YYYY-MM-DD
    submissions: NonNegativeInt = 0
    formatted_date: str = ""  # "Mar 4"


class AssignmentAnalytics(CamelModel):
    id: str
    title: str
    due_date: str | None = None
    max_points: float | None = None
    submitted_count: NonNegativeInt = 0
    missing_count: NonNegativeInt = 0
    late_count: NonNegativeInt = 0
    total_students: NonNegativeInt = 0
    submission_rate: Rate = 0.0


class StudentAnalytics(CamelModel):
    user_id: str
    name: str
    email: str | None = None
    photo_url: str | None = None
    submission_percentage: Percentage = 0
    submitted_count: NonNegativeInt = 0
    missing_count: NonNegativeInt = 0
    late_count: NonNegativeInt = 0
    last_submission_date: str | None = None
    status: StudentStatus = StudentStatus.INACTIVE


class CourseAnalytics(CamelModel):
    course_id: str
    course_name: str
    summary: AnalyticsSummary
    engagement_data: list[EngagementDataPoint] = Field(default_factory=list)
    assignment_stats: list[AssignmentAnalytics] = Field(default_factory=list)
    student_progress: list[StudentAnalytics] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# School-wide analytics
# ---------------------------------------------------------------------------

class CoursePerformance(CamelModel):
    course_id: str
    course_name: str
    teacher_name: str = ""
    teacher_email: str | None = None
    student_count: NonNegativeInt = 0
    assignment_count: NonNegativeInt = 0
    submission_rate: Percentage = 0
    late_rate: Percentage = 0
    at_risk_students: NonNegativeInt = 0
    last_activity: str | None = None


class TeacherPerformance(CamelModel):
    user_id: str
    name: str
    email: str | None = None
    photo_url: str | None = None
    courses_count: NonNegativeInt = 0
    total_students: NonNegativeInt = 0
    total_assignments: NonNegativeInt = 0
    average_submission_rate: Percentage = 0
    average_late_rate: Percentage = 0


class SchoolOverview(CamelModel):
    total_courses: NonNegativeInt = 0
    active_courses: NonNegativeInt = 0
    total_teachers: NonNegativeInt = 0
    total_students: NonNegativeInt = 0
    total_assignments: NonNegativeInt = 0
    total_submissions: NonNegativeInt = 0
    overall_submission_rate: Percentage = 0
    overall_late_rate: Percentage = 0
    at_risk_students_count: NonNegativeInt = 0
    inactive_students_count: NonNegativeInt = 0


class ClassroomInsight(CamelModel):
    id: str
    type: Literal["positive", "warning", "info"]
    title: str
    description: str
    metric: str | None = None
    change: float | None = None


class ActivityUser(CamelModel):
    name: str
    email: str | None = None
    photo_url: str | None = None


class ActivityItem(CamelModel):
    id: str
    type: Literal["submission", "enrollment", "assignment", "announcement", "grade"]
    title: str
    description: str
    timestamp: str
    user: ActivityUser | None = None
    course_name: str | None = None
    late: bool = False


class SchoolAnalytics(CamelModel):
    overview: SchoolOverview
    summary: AnalyticsSummary
    engagement_data: list[EngagementDataPoint] = Field(default_factory=list)
    course_performance: list[CoursePerformance] = Field(default_factory=list)
    teacher_performance: list[TeacherPerformance] = Field(default_factory=list)
    at_risk_students: list[StudentAnalytics] = Field(default_factory=list)
    top_performing_courses: list[CoursePerformance] = Field(default_factory=list)
    low_performing_courses: list[CoursePerformance] = Field(default_factory=list)
    recent_activity: list[ActivityItem] = Field(default_factory=list)
    insights: list[ClassroomInsight] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Person detail views
# ---------------------------------------------------------------------------

class StudentAssignmentRecord(CamelModel):
    id: str
    title: str
    due_date: str | None = None
    max_points: float | None = None
    state: str
    late: bool = False
    grade: float | None = None


class StudentCoursePerformance(CamelModel):
    course_id: str
    course_name: str
    total_assignments: NonNegativeInt = 0
    submitted_count: NonNegativeInt = 0
    late_count: NonNegativeInt = 0
    missing_count: NonNegativeInt = 0
    submission_rate: Percentage = 0
    assignments: list[StudentAssignmentRecord] = Field(default_factory=list)


class StudentDetail(CamelModel):
    user_id: str
    name: str
    email: str | None = None
    photo_url: str | None = None
    overall_submission_rate: Percentage = 0
    total_courses: NonNegativeInt = 0
    total_assignments: NonNegativeInt = 0
    total_submitted: NonNegativeInt = 0
    total_late: NonNegativeInt = 0
    total_missing: NonNegativeInt = 0
    course_performance: list[StudentCoursePerformance] = Field(default_factory=list)


class TeacherCoursePerformance(CamelModel):
    course_id: str
    course_name: str
    student_count: NonNegativeInt = 0
    assignment_count: NonNegativeInt = 0
    submission_rate: Percentage = 0
    late_rate: Percentage = 0


class TeacherDetail(CamelModel):
    user_id: str
    name: str
    email: str | None = None
    photo_url: str | None = None
    total_courses: NonNegativeInt = 0
    total_students: NonNegativeInt = 0
    total_assignments: NonNegativeInt = 0
    average_submission_rate: Percentage = 0
    average_late_rate: Percentage = 0
    course_performance: list[TeacherCoursePerformance] = Field(default_factory=list)
