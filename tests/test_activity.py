"""Tests for services/activity.py — the recent-activity feed."""

from models.classroom import SubmissionState
from services.activity import build_recent_activity
from tests.factories import bundle, course, person, sub, ts, work


def test_feed_newest_first():
    b = bundle(
        course("c-1", "History"),
        [work("w-1", title="Essay")],
        [person("s-1", "Ana", email="ana@school.test"), person("s-2", "Ben")],
        submissions=[
            sub("s-1", "w-1", update_time=ts(2025, 3, 1)),
            sub("s-2", "w-1", late=True, update_time=ts(2025, 3, 5)),
        ],
    )
    items = build_recent_activity([b])

    assert [i.id for i in items] == ["w-1-s-2", "w-1-s-1"]
    first = items[0]
    assert first.type == "submission"
    assert first.title == "Submitted: Essay"
    assert first.description == "Ben"
    assert first.course_name == "History"
    assert first.late is True
    assert items[1].user.email == "ana@school.test"


def test_feed_skips_unsubmitted_and_untimed():
    b = bundle(
        course("c-1"),
        [work("w-1")],
        [person("s-1"), person("s-2")],
        submissions=[
            sub("s-1", "w-1", state=SubmissionState.CREATED, update_time=ts(2025, 3, 1)),
            sub("s-2", "w-1", update_time=None),
        ],
    )
    assert build_recent_activity([b]) == []


def test_feed_student_not_on_roster():
    b = bundle(course("c-1"), [work("w-1")], [], submissions=[sub("s-9", "w-1", update_time=ts(2025, 3, 1))])
    item = build_recent_activity([b])[0]
    assert item.description == "A student"
    assert item.user is None


def test_feed_limit_and_bad_timestamps_last():
    works = [work(f"w-{i}") for i in range(25)]
    submissions = [sub("s-1", f"w-{i}", update_time=ts(2025, 2, 1 + i)) for i in range(24)]
    submissions.append(sub("s-1", "w-24", update_time="garbage"))
    b = bundle(course("c-1"), works, [person("s-1")], submissions=submissions)

    items = build_recent_activity([b], limit=25)
    assert len(items) == 25
    assert items[0].id == "w-23-s-1"
    assert items[-1].id == "w-24-s-1"

    assert len(build_recent_activity([b])) == 20
