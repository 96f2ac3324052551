"""Per-course aggregation: roster × coursework × submissions → analytics.

All functions are pure: they read a fully fetched snapshot and return new
records. ``now`` is injectable so due-date and engagement-window logic can be
pinned in tests; it defaults to the current local time.
"""

from __future__ import annotations

from datetime import datetime
from itertools import chain
from typing import Iterator

from models.analytics import (
    AnalyticsSummary,
    AssignmentAnalytics,
    CourseAnalytics,
    EngagementDataPoint,
    StudentAnalytics,
)
from models.classroom import CourseBundle, CourseWork, Person, Submission, SubmissionState
from services.engagement import (
    build_engagement_series,
    display_date,
    format_display_date,
    latest_timestamp,
    merge_engagement_series,
    to_local,
)
from services.risk import classify_student, submission_percentage, submission_rate


SubmissionsByWork = dict[str, list[Submission]]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def index_submissions(submissions: list[Submission]) -> dict[str, Submission]:
    """Map student id → that student's record (first one wins)."""
    index: dict[str, Submission] = {}
    for sub in submissions:
        index.setdefault(sub.user_id, sub)
    return index


def index_course(
    course_work: list[CourseWork], submissions_by_work: SubmissionsByWork
) -> dict[str, dict[str, Submission]]:
    """Per-work student indexes for one course."""
    return {
        work.id: index_submissions(submissions_by_work.get(work.id, []))
        for work in course_work
    }


def submitted_by_student(
    course_work: list[CourseWork],
    indexes: dict[str, dict[str, Submission]],
    user_id: str,
) -> list[Submission]:
    """The student's submitted-state records, one per CourseWork at most."""
    submitted: list[Submission] = []
    for work in course_work:
        sub = indexes.get(work.id, {}).get(user_id)
        if sub is not None and sub.is_submitted:
            submitted.append(sub)
    return submitted


def not_submitted(work: CourseWork, user_id: str) -> Submission:
    """Placeholder for a student the provider returned no record for."""
    return Submission(
        course_work_id=work.id,
        user_id=user_id,
        state=SubmissionState.NOT_SUBMITTED,
    )


def work_records(
    work: CourseWork, students: list[Person], submissions: list[Submission]
) -> Iterator[Submission]:
    """Provider records for ``work`` plus placeholders for unrecorded students."""
    yield from submissions
    recorded = {sub.user_id for sub in submissions}
    for student in students:
        if student.user_id not in recorded:
            yield not_submitted(work, student.user_id)


def count_submitted(submissions: list[Submission]) -> tuple[int, int]:
    """Return ``(submitted, late)`` for a list of records."""
    submitted = late = 0
    for sub in submissions:
        if sub.is_submitted:
            submitted += 1
            if sub.late:
                late += 1
    return submitted, late


def due_date_display(work: CourseWork) -> str | None:
    due = work.due_date.to_date() if work.due_date else None
    return display_date(due) if due else None


def is_past_due(work: CourseWork, now: datetime | None = None) -> bool:
    """True when the due date's local midnight is already behind ``now``."""
    due = work.due_date.to_date() if work.due_date else None
    if due is None:
        return False
    current = to_local(now or datetime.now()).replace(tzinfo=None)
    return current > datetime(due.year, due.month, due.day)


# ---------------------------------------------------------------------------
# Per-course computations
# ---------------------------------------------------------------------------

def compute_summary(
    course_work: list[CourseWork],
    students: list[Person],
    submissions_by_work: SubmissionsByWork,
    now: datetime | None = None,
) -> AnalyticsSummary:
    total_submissions = late_submissions = missing_submissions = 0

    for work in course_work:
        submissions = submissions_by_work.get(work.id, [])
        submitted, late = count_submitted(submissions)
        total_submissions += submitted
        late_submissions += late

        if is_past_due(work, now):
            missing_submissions += sum(
                1 for sub in work_records(work, students, submissions) if sub.is_pending
            )

    return AnalyticsSummary(
        total_students=len(students),
        total_assignments=len(course_work),
        total_submissions=total_submissions,
        late_submissions=late_submissions,
        missing_submissions=missing_submissions,
    )


def compute_engagement_data(
    submissions_by_work: SubmissionsByWork,
    now: datetime | None = None,
) -> list[EngagementDataPoint]:
    return build_engagement_series(chain.from_iterable(submissions_by_work.values()), now)


def compute_assignment_stats(
    course_work: list[CourseWork],
    total_students: int,
    submissions_by_work: SubmissionsByWork,
) -> list[AssignmentAnalytics]:
    stats: list[AssignmentAnalytics] = []
    for work in course_work:
        submitted, late = count_submitted(submissions_by_work.get(work.id, []))
        stats.append(AssignmentAnalytics(
            id=work.id,
            title=work.title,
            due_date=due_date_display(work),
            max_points=work.max_points,
            submitted_count=submitted,
            missing_count=max(0, total_students - submitted),
            late_count=late,
            total_students=total_students,
            submission_rate=submission_rate(submitted, total_students),
        ))
    return stats


def compute_student_progress(
    students: list[Person],
    course_work: list[CourseWork],
    submissions_by_work: SubmissionsByWork,
) -> list[StudentAnalytics]:
    total_assignments = len(course_work)
    indexes = index_course(course_work, submissions_by_work)

    progress: list[StudentAnalytics] = []
    for student in students:
        submitted = submitted_by_student(course_work, indexes, student.user_id)
        submitted_count = len(submitted)
        percentage = submission_percentage(submitted_count, total_assignments)
        last = latest_timestamp(sub.update_time for sub in submitted)

        progress.append(StudentAnalytics(
            user_id=student.user_id,
            name=student.display_name("Unknown Student"),
            email=student.email,
            photo_url=student.photo_url,
            submission_percentage=percentage,
            submitted_count=submitted_count,
            missing_count=total_assignments - submitted_count,
            late_count=sum(1 for sub in submitted if sub.late),
            last_submission_date=format_display_date(last),
            status=classify_student(percentage),
        ))
    return progress


def compute_course_analytics(bundle: CourseBundle, now: datetime | None = None) -> CourseAnalytics:
    """Full analytics for one course."""
    course_work, students = bundle.course_work, bundle.students
    submissions_by_work = bundle.submissions_by_work

    return CourseAnalytics(
        course_id=bundle.course.id,
        course_name=bundle.course.name,
        summary=compute_summary(course_work, students, submissions_by_work, now),
        engagement_data=compute_engagement_data(submissions_by_work, now),
        assignment_stats=compute_assignment_stats(course_work, len(students), submissions_by_work),
        student_progress=compute_student_progress(students, course_work, submissions_by_work),
    )


# ---------------------------------------------------------------------------
# Teacher-wide merge
# ---------------------------------------------------------------------------

def aggregate_course_analytics(course_analytics: list[CourseAnalytics]) -> CourseAnalytics:
    """Merge several courses into a single "All Courses" view.

    Summary fields are summed (students are not deduplicated here), the
    engagement series are summed per day, assignment rows are concatenated
    and each student keeps the row from the first course they appear in.
    """
    summary = AnalyticsSummary(
        total_students=sum(ca.summary.total_students for ca in course_analytics),
        total_assignments=sum(ca.summary.total_assignments for ca in course_analytics),
        total_submissions=sum(ca.summary.total_submissions for ca in course_analytics),
        late_submissions=sum(ca.summary.late_submissions for ca in course_analytics),
        missing_submissions=sum(ca.summary.missing_submissions for ca in course_analytics),
    )

    students: dict[str, StudentAnalytics] = {}
    for ca in course_analytics:
        for row in ca.student_progress:
            students.setdefault(row.user_id, row)

    return CourseAnalytics(
        course_id="all",
        course_name="All Courses",
        summary=summary,
        engagement_data=merge_engagement_series(ca.engagement_data for ca in course_analytics),
        assignment_stats=[row for ca in course_analytics for row in ca.assignment_stats],
        student_progress=list(students.values()),
    )
