"""Cross-course aggregation: school-wide and per-teacher rollups.

Input is the list of :class:`CourseBundle` produced by the data loader.
People are deduplicated by ``user_id`` wherever a distinct count or a merged
row is reported. Two deliberate exceptions:

- the overview's at-risk / inactive counts classify each (student, course)
  pair separately and sum them, so a student in two courses can count twice;
- ``CoursePerformance.at_risk_students`` uses the single ``< 80%`` policy
  from :func:`services.risk.is_course_at_risk`.

:func:`identify_at_risk_students` sums a student's totals across all their
courses before classifying, so its result does not have to agree with the
overview counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from models.analytics import (
    AnalyticsSummary,
    CoursePerformance,
    EngagementDataPoint,
    SchoolAnalytics,
    SchoolOverview,
    StudentAnalytics,
    StudentStatus,
    TeacherPerformance,
)
from models.classroom import CourseBundle, Person, Submission
from services.activity import build_recent_activity
from services.course_analytics import (
    compute_summary,
    count_submitted,
    index_course,
    submitted_by_student,
)
from services.engagement import build_engagement_series, format_display_date, latest_timestamp
from services.insights import generate_insights
from services.risk import (
    classify_student,
    is_course_at_risk,
    submission_percentage,
    submission_rate,
)

RANKING_SIZE = 5


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _course_totals(bundle: CourseBundle) -> tuple[int, int]:
    """``(submitted, late)`` across every CourseWork of a course."""
    submitted = late = 0
    for work in bundle.course_work:
        work_submitted, work_late = count_submitted(bundle.submissions_for(work.id))
        submitted += work_submitted
        late += work_late
    return submitted, late


def _expected_submissions(bundle: CourseBundle) -> int:
    return len(bundle.students) * len(bundle.course_work)


def _student_rates(bundle: CourseBundle) -> list[float]:
    """Unrounded per-student rate in one course; 100 when it has no work."""
    indexes = index_course(bundle.course_work, bundle.submissions_by_work)
    total = len(bundle.course_work)
    return [
        submission_rate(
            len(submitted_by_student(bundle.course_work, indexes, student.user_id)),
            total,
            empty=100.0,
        )
        for student in bundle.students
    ]


def _all_submissions(bundles: list[CourseBundle]) -> list[Submission]:
    return [
        sub
        for bundle in bundles
        for work in bundle.course_work
        for sub in bundle.submissions_for(work.id)
    ]


# ---------------------------------------------------------------------------
# Overview & summary
# ---------------------------------------------------------------------------

def compute_school_overview(bundles: list[CourseBundle]) -> SchoolOverview:
    teacher_ids: set[str] = set()
    student_ids: set[str] = set()
    total_assignments = total_submissions = late_submissions = expected = 0
    at_risk_count = inactive_count = 0

    for bundle in bundles:
        teacher_ids.update(t.user_id for t in bundle.teachers)
        student_ids.update(s.user_id for s in bundle.students)
        total_assignments += len(bundle.course_work)
        expected += _expected_submissions(bundle)

        submitted, late = _course_totals(bundle)
        total_submissions += submitted
        late_submissions += late

        for rate in _student_rates(bundle):
            status = classify_student(rate)
            if status == StudentStatus.INACTIVE:
                inactive_count += 1
            elif status == StudentStatus.AT_RISK:
                at_risk_count += 1

    return SchoolOverview(
        total_courses=len(bundles),
        active_courses=sum(1 for b in bundles if b.course.is_active),
        total_teachers=len(teacher_ids),
        total_students=len(student_ids),
        total_assignments=total_assignments,
        total_submissions=total_submissions,
        overall_submission_rate=submission_percentage(total_submissions, expected),
        overall_late_rate=submission_percentage(late_submissions, total_submissions),
        at_risk_students_count=at_risk_count,
        inactive_students_count=inactive_count,
    )


def compute_aggregate_summary(
    bundles: list[CourseBundle], now: datetime | None = None
) -> AnalyticsSummary:
    """Course summaries added up, with students counted once."""
    summaries = [
        compute_summary(b.course_work, b.students, b.submissions_by_work, now)
        for b in bundles
    ]
    student_ids = {s.user_id for b in bundles for s in b.students}
    return AnalyticsSummary(
        total_students=len(student_ids),
        total_assignments=sum(s.total_assignments for s in summaries),
        total_submissions=sum(s.total_submissions for s in summaries),
        late_submissions=sum(s.late_submissions for s in summaries),
        missing_submissions=sum(s.missing_submissions for s in summaries),
    )


def compute_aggregate_engagement(
    bundles: list[CourseBundle], now: datetime | None = None
) -> list[EngagementDataPoint]:
    return build_engagement_series(_all_submissions(bundles), now)


# ---------------------------------------------------------------------------
# Course & teacher performance
# ---------------------------------------------------------------------------

def compute_course_performance(bundles: list[CourseBundle]) -> list[CoursePerformance]:
    rows: list[CoursePerformance] = []
    for bundle in bundles:
        submitted, late = _course_totals(bundle)
        last_activity = latest_timestamp(
            sub.update_time
            for work in bundle.course_work
            for sub in bundle.submissions_for(work.id)
            if sub.is_submitted
        )
        rows.append(CoursePerformance(
            course_id=bundle.course.id,
            course_name=bundle.course.name,
            teacher_name=", ".join(t.display_name("Unknown") for t in bundle.teachers),
            teacher_email=bundle.teachers[0].email if bundle.teachers else None,
            student_count=len(bundle.students),
            assignment_count=len(bundle.course_work),
            submission_rate=submission_percentage(submitted, _expected_submissions(bundle)),
            late_rate=submission_percentage(late, submitted),
            at_risk_students=sum(1 for rate in _student_rates(bundle) if is_course_at_risk(rate)),
            last_activity=format_display_date(last_activity),
        ))
    return rows


def compute_teacher_performance(bundles: list[CourseBundle]) -> list[TeacherPerformance]:
    teachers: dict[str, Person] = {}
    courses_by_teacher: dict[str, list[CourseBundle]] = {}
    for bundle in bundles:
        for teacher in bundle.teachers:
            teachers.setdefault(teacher.user_id, teacher)
            courses_by_teacher.setdefault(teacher.user_id, []).append(bundle)

    rows: list[TeacherPerformance] = []
    for user_id, teacher in teachers.items():
        courses = courses_by_teacher[user_id]
        student_ids = {s.user_id for b in courses for s in b.students}
        submitted = late = expected = 0
        for bundle in courses:
            course_submitted, course_late = _course_totals(bundle)
            submitted += course_submitted
            late += course_late
            expected += _expected_submissions(bundle)

        rows.append(TeacherPerformance(
            user_id=user_id,
            name=teacher.display_name("Unknown Teacher"),
            email=teacher.email,
            photo_url=teacher.photo_url,
            courses_count=len(courses),
            total_students=len(student_ids),
            total_assignments=sum(len(b.course_work) for b in courses),
            average_submission_rate=submission_percentage(submitted, expected),
            average_late_rate=submission_percentage(late, submitted),
        ))
    return rows


def rank_courses(
    course_performance: list[CoursePerformance], limit: int = RANKING_SIZE
) -> tuple[list[CoursePerformance], list[CoursePerformance]]:
    """Return ``(top, low)`` course lists by submission rate.

    The sort is stable, so equal rates keep their input order; ``low`` is the
    tail of the descending order, reversed (worst first).
    """
    ordered = sorted(course_performance, key=lambda c: c.submission_rate, reverse=True)
    top = ordered[:limit]
    low = list(reversed(ordered[-limit:])) if limit > 0 else []
    return top, low


# ---------------------------------------------------------------------------
# At-risk students
# ---------------------------------------------------------------------------

@dataclass
class _StudentTotals:
    person: Person
    total_assignments: int = 0
    submitted: list[Submission] = field(default_factory=list)


def identify_at_risk_students(bundles: list[CourseBundle]) -> list[StudentAnalytics]:
    """At-risk and inactive students, worst first.

    Each student's totals are summed across every course they are enrolled
    in before the percentage and status are computed.
    """
    totals: dict[str, _StudentTotals] = {}
    for bundle in bundles:
        indexes = index_course(bundle.course_work, bundle.submissions_by_work)
        for student in bundle.students:
            entry = totals.setdefault(student.user_id, _StudentTotals(person=student))
            entry.total_assignments += len(bundle.course_work)
            entry.submitted.extend(
                submitted_by_student(bundle.course_work, indexes, student.user_id)
            )

    flagged: list[StudentAnalytics] = []
    for user_id, entry in totals.items():
        submitted_count = len(entry.submitted)
        percentage = submission_percentage(submitted_count, entry.total_assignments)
        status = classify_student(percentage)
        if status == StudentStatus.GOOD:
            continue
        flagged.append(StudentAnalytics(
            user_id=user_id,
            name=entry.person.display_name("Unknown Student"),
            email=entry.person.email,
            photo_url=entry.person.photo_url,
            submission_percentage=percentage,
            submitted_count=submitted_count,
            missing_count=entry.total_assignments - submitted_count,
            late_count=sum(1 for sub in entry.submitted if sub.late),
            last_submission_date=format_display_date(
                latest_timestamp(sub.update_time for sub in entry.submitted)
            ),
            status=status,
        ))

    flagged.sort(key=lambda s: s.submission_percentage)
    return flagged


# ---------------------------------------------------------------------------
# Full school report
# ---------------------------------------------------------------------------

def compute_school_analytics(
    bundles: list[CourseBundle], now: datetime | None = None
) -> SchoolAnalytics:
    """Everything the school dashboard shows, from one fetched snapshot."""
    overview = compute_school_overview(bundles)
    course_performance = compute_course_performance(bundles)
    teacher_performance = compute_teacher_performance(bundles)
    top, low = rank_courses(course_performance)

    return SchoolAnalytics(
        overview=overview,
        summary=compute_aggregate_summary(bundles, now),
        engagement_data=compute_aggregate_engagement(bundles, now),
        course_performance=course_performance,
        teacher_performance=teacher_performance,
        at_risk_students=identify_at_risk_students(bundles),
        top_performing_courses=top,
        low_performing_courses=low,
        recent_activity=build_recent_activity(bundles),
        insights=generate_insights(overview),
    )
