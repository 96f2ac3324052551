"""Single-person drill-down views (one student, one teacher) across courses."""

from __future__ import annotations

from errors import StudentNotFoundError, TeacherNotFoundError
from models.analytics import (
    StudentAssignmentRecord,
    StudentCoursePerformance,
    StudentDetail,
    TeacherCoursePerformance,
    TeacherDetail,
)
from models.classroom import CourseBundle, Person
from services.course_analytics import (
    count_submitted,
    due_date_display,
    index_submissions,
    not_submitted,
)
from services.risk import round_half_up, submission_percentage


def _find(people: list[Person], user_id: str) -> Person | None:
    for person in people:
        if person.user_id == user_id:
            return person
    return None


def _student_course(bundle: CourseBundle, student_id: str) -> StudentCoursePerformance:
    assignments: list[StudentAssignmentRecord] = []
    submitted = late = 0
    for work in bundle.course_work:
        sub = index_submissions(bundle.submissions_for(work.id)).get(student_id)
        if sub is None:
            sub = not_submitted(work, student_id)
        if sub.is_submitted:
            submitted += 1
            if sub.late:
                late += 1
        assignments.append(StudentAssignmentRecord(
            id=work.id,
            title=work.title,
            due_date=due_date_display(work),
            max_points=work.max_points,
            state=sub.state.value,
            late=sub.late,
            grade=sub.assigned_grade,
        ))

    total = len(bundle.course_work)
    return StudentCoursePerformance(
        course_id=bundle.course.id,
        course_name=bundle.course.name,
        total_assignments=total,
        submitted_count=submitted,
        late_count=late,
        missing_count=total - submitted,
        submission_rate=submission_percentage(submitted, total),
        assignments=assignments,
    )


def compute_student_detail(bundles: list[CourseBundle], student_id: str) -> StudentDetail:
    """Per-course breakdown for one student.

    Raises:
        StudentNotFoundError: the student is not enrolled in any bundle.
    """
    profile: Person | None = None
    courses: list[StudentCoursePerformance] = []
    for bundle in bundles:
        student = _find(bundle.students, student_id)
        if student is None:
            continue
        profile = profile or student
        courses.append(_student_course(bundle, student_id))

    if profile is None:
        raise StudentNotFoundError(student_id)

    total_assignments = sum(c.total_assignments for c in courses)
    total_submitted = sum(c.submitted_count for c in courses)
    return StudentDetail(
        user_id=student_id,
        name=profile.display_name("Unknown Student"),
        email=profile.email,
        photo_url=profile.photo_url,
        overall_submission_rate=submission_percentage(total_submitted, total_assignments),
        total_courses=len(courses),
        total_assignments=total_assignments,
        total_submitted=total_submitted,
        total_late=sum(c.late_count for c in courses),
        total_missing=sum(c.missing_count for c in courses),
        course_performance=courses,
    )


def compute_teacher_detail(bundles: list[CourseBundle], teacher_id: str) -> TeacherDetail:
    """Per-course breakdown for one teacher.

    Averages here are the mean of the per-course rates, unlike
    ``TeacherPerformance`` which pools submissions across courses.

    Raises:
        TeacherNotFoundError: the teacher is not on any bundle's roster.
    """
    profile: Person | None = None
    courses: list[TeacherCoursePerformance] = []
    for bundle in bundles:
        teacher = _find(bundle.teachers, teacher_id)
        if teacher is None:
            continue
        profile = profile or teacher

        submitted = late = 0
        for work in bundle.course_work:
            work_submitted, work_late = count_submitted(bundle.submissions_for(work.id))
            submitted += work_submitted
            late += work_late
        courses.append(TeacherCoursePerformance(
            course_id=bundle.course.id,
            course_name=bundle.course.name,
            student_count=len(bundle.students),
            assignment_count=len(bundle.course_work),
            submission_rate=submission_percentage(
                submitted, len(bundle.students) * len(bundle.course_work)
            ),
            late_rate=submission_percentage(late, submitted),
        ))

    if profile is None:
        raise TeacherNotFoundError(teacher_id)

    count = len(courses)
    return TeacherDetail(
        user_id=teacher_id,
        name=profile.display_name("Unknown Teacher"),
        email=profile.email,
        photo_url=profile.photo_url,
        total_courses=count,
        total_students=sum(c.student_count for c in courses),
        total_assignments=sum(c.assignment_count for c in courses),
        average_submission_rate=(
            round_half_up(sum(c.submission_rate for c in courses) / count) if count else 0
        ),
        average_late_rate=(
            round_half_up(sum(c.late_rate for c in courses) / count) if count else 0
        ),
        course_performance=courses,
    )
