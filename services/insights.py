"""Rule-based school insights.

Each rule looks at the already computed aggregates on its own; every rule
that applies contributes one insight, in rule order.
"""

from __future__ import annotations

from models.analytics import ClassroomInsight, SchoolOverview

HIGH_SUBMISSION_RATE = 80
LOW_SUBMISSION_RATE = 60
AT_RISK_SHARE = 0.2


def generate_insights(overview: SchoolOverview) -> list[ClassroomInsight]:
    insights: list[ClassroomInsight] = []
    rate = overview.overall_submission_rate

    if rate >= HIGH_SUBMISSION_RATE:
        insights.append(ClassroomInsight(
            id="high-submission-rate",
            type="positive",
            title="Excellent Submission Rate",
            description="Your school maintains a high submission rate across all courses.",
            metric=f"{rate}% completion",
        ))

    if rate < LOW_SUBMISSION_RATE:
        insights.append(ClassroomInsight(
            id="low-submission-rate",
            type="warning",
            title="Low Submission Rate",
            description="Consider implementing engagement strategies to improve assignment completion.",
            metric=f"{rate}% completion",
        ))

    if overview.at_risk_students_count > overview.total_students * AT_RISK_SHARE:
        insights.append(ClassroomInsight(
            id="high-at-risk-count",
            type="warning",
            title="High At-Risk Student Count",
            description=(
                f"{overview.at_risk_students_count} students need additional "
                "support to stay on track."
            ),
            metric=f"{overview.at_risk_students_count} of {overview.total_students} students",
        ))

    insights.append(ClassroomInsight(
        id="community-summary",
        type="info",
        title="Active Learning Community",
        description=(
            f"{overview.total_teachers} teachers actively managing "
            f"{overview.total_courses} courses."
        ),
    ))

    return insights
