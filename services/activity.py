"""Recent activity feed built from submission events."""

from __future__ import annotations

from models.analytics import ActivityItem, ActivityUser
from models.classroom import CourseBundle
from services.engagement import parse_timestamp

RECENT_ACTIVITY_LIMIT = 20


def _sort_key(item: ActivityItem) -> float:
    moment = parse_timestamp(item.timestamp)
    # Unparseable timestamps sink to the bottom.
    return moment.timestamp() if moment else float("-inf")


def build_recent_activity(
    bundles: list[CourseBundle], limit: int = RECENT_ACTIVITY_LIMIT
) -> list[ActivityItem]:
    """Newest submitted events across all courses."""
    items: list[ActivityItem] = []
    for bundle in bundles:
        roster = {s.user_id: s for s in bundle.students}
        for work in bundle.course_work:
            for sub in bundle.submissions_for(work.id):
                if not sub.is_submitted or not sub.update_time:
                    continue
                student = roster.get(sub.user_id)
                items.append(ActivityItem(
                    id=f"{work.id}-{sub.user_id}",
                    type="submission",
                    title=f"Submitted: {work.title}",
                    description=student.display_name("A student") if student else "A student",
                    timestamp=sub.update_time,
                    user=ActivityUser(
                        name=student.display_name("Unknown"),
                        email=student.email,
                        photo_url=student.photo_url,
                    ) if student else None,
                    course_name=bundle.course.name,
                    late=sub.late,
                ))

    items.sort(key=_sort_key, reverse=True)
    return items[:limit]
