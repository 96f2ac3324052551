"""Tests for services/data_loader.py — fan-out fetch and partial-failure policy."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from services.classroom_client import ClassroomClientError
from services.data_loader import load_course_bundle, load_course_bundles
from tests.factories import course, person, sub, work


@pytest.fixture
def client():
    return MagicMock()


def _patch_adapters(course_work=None, students=None, teachers=None, submissions=None):
    """Patch the adapter calls used by the loader; values may be exceptions."""

    def _mock(value):
        if isinstance(value, Exception):
            return AsyncMock(side_effect=value)
        return AsyncMock(return_value=value if value is not None else [])

    return (
        patch("services.data_loader.list_course_work", _mock(course_work)),
        patch("services.data_loader.list_students", _mock(students)),
        patch("services.data_loader.list_teachers", _mock(teachers)),
        patch("services.data_loader.list_submissions", _mock(submissions)),
    )


@pytest.mark.asyncio
async def test_load_course_bundle(client):
    works = [work("w-1"), work("w-2")]
    p1, p2, p3, p4 = _patch_adapters(
        course_work=works,
        students=[person("s-1")],
        teachers=[person("t-1")],
        submissions=[sub("s-1", "w-1")],
    )
    with p1, p2, p3, p4 as mock_subs:
        result = await load_course_bundle(client, "tok", course("c-1"))

    assert result.course.id == "c-1"
    assert [w.id for w in result.course_work] == ["w-1", "w-2"]
    assert set(result.submissions_by_work) == {"w-1", "w-2"}
    assert mock_subs.await_count == 2
    mock_subs.assert_any_await(client, "tok", "c-1", "w-2")


@pytest.mark.asyncio
async def test_failed_roster_becomes_empty(client):
    p1, p2, p3, p4 = _patch_adapters(
        course_work=[work("w-1")],
        students=ClassroomClientError(403, "forbidden"),
        teachers=[person("t-1")],
        submissions=[sub("s-1", "w-1")],
    )
    with p1, p2, p3, p4:
        result = await load_course_bundle(client, "tok", course("c-1"))

    assert result.students == []
    assert [t.user_id for t in result.teachers] == ["t-1"]
    assert len(result.submissions_for("w-1")) == 1


@pytest.mark.asyncio
async def test_failed_submissions_become_empty(client):
    p1, p2, p3, p4 = _patch_adapters(
        course_work=[work("w-1")],
        students=[person("s-1")],
        submissions=ClassroomClientError(0, "timeout"),
    )
    with p1, p2, p3, p4:
        result = await load_course_bundle(client, "tok", course("c-1"))

    assert result.submissions_by_work == {"w-1": []}


@pytest.mark.asyncio
async def test_failed_course_work_skips_submissions(client):
    p1, p2, p3, p4 = _patch_adapters(course_work=ClassroomClientError(500, "boom"))
    with p1, p2, p3, p4 as mock_subs:
        result = await load_course_bundle(client, "tok", course("c-1"))

    assert result.course_work == []
    mock_subs.assert_not_awaited()


@pytest.mark.asyncio
async def test_load_course_bundles_drops_failed_course(client):
    async def fake_load(_client, _token, c):
        if c.id == "c-2":
            raise RuntimeError("unexpected")
        return MagicMock(course=c)

    with patch("services.data_loader.load_course_bundle", side_effect=fake_load):
        bundles = await load_course_bundles(
            client, "tok", [course("c-1"), course("c-2"), course("c-3")], max_concurrency=2
        )

    assert [b.course.id for b in bundles] == ["c-1", "c-3"]


@pytest.mark.asyncio
async def test_load_course_bundles_bounded_concurrency(client):
    in_flight = 0
    peak = 0

    async def fake_load(_client, _token, c):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return MagicMock(course=c)

    courses = [course(f"c-{i}") for i in range(6)]
    with patch("services.data_loader.load_course_bundle", side_effect=fake_load):
        bundles = await load_course_bundles(client, "tok", courses, max_concurrency=2)

    assert len(bundles) == 6
    assert peak <= 2


@pytest.mark.asyncio
async def test_load_course_bundles_empty(client):
    assert await load_course_bundles(client, "tok", [], max_concurrency=1) == []
