"""Tests for services/analytics_service.py — fetch + aggregate entry points."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from errors import ProviderFetchError, StudentNotFoundError
from models.classroom import CourseState
from services import analytics_service
from services.classroom_client import ClassroomClientError
from tests.factories import bundle, course, person, sub, ts, work


@pytest.fixture
def client():
    return MagicMock()


# ---------------------------------------------------------------------------
# Course lists
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_teacher_courses_use_me(client):
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[course("c-1")])) as mock_list:
        result = await analytics_service.get_teacher_courses(client, "tok")

    assert [c.id for c in result] == ["c-1"]
    mock_list.assert_awaited_once_with(client, "tok", teacher_id="me")


@pytest.mark.asyncio
async def test_active_courses_filtered(client):
    courses = [course("c-1"), course("c-2", state=CourseState.ARCHIVED)]
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=courses)):
        result = await analytics_service.get_active_courses(client, "tok")
    assert [c.id for c in result] == ["c-1"]


@pytest.mark.asyncio
async def test_course_list_failure_raises(client):
    failing = AsyncMock(side_effect=ClassroomClientError(401, "invalid credentials"))
    with patch("services.analytics_service.list_courses", failing):
        with pytest.raises(ProviderFetchError) as exc_info:
            await analytics_service.get_school_analytics(client, "tok")

    assert exc_info.value.status_code == 401
    assert "course list" in str(exc_info.value)


@pytest.mark.asyncio
async def test_course_list_bad_body_raises(client):
    failing = AsyncMock(side_effect=ClassroomClientError(200, "invalid JSON body"))
    with patch("services.analytics_service.list_courses", failing):
        with pytest.raises(ProviderFetchError) as exc_info:
            await analytics_service.get_school_analytics(client, "tok")

    assert "invalid JSON body" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Teacher views
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_course_analytics(client, two_student_bundle, now):
    with patch("services.analytics_service.get_course", AsyncMock(return_value=two_student_bundle.course)), \
         patch("services.analytics_service.load_course_bundle", AsyncMock(return_value=two_student_bundle)):
        result = await analytics_service.get_course_analytics(client, "tok", "c-1", now=now)

    assert result.course_id == "c-1"
    assert result.summary.total_submissions == 2


@pytest.mark.asyncio
async def test_course_analytics_missing_course(client):
    failing = AsyncMock(side_effect=ClassroomClientError(404, "not found"))
    with patch("services.analytics_service.get_course", failing):
        with pytest.raises(ProviderFetchError) as exc_info:
            await analytics_service.get_course_analytics(client, "tok", "c-9")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_aggregated_analytics_none_without_courses(client):
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[])):
        assert await analytics_service.get_aggregated_analytics(client, "tok") is None


@pytest.mark.asyncio
async def test_aggregated_analytics_none_when_nothing_loads(client):
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[course("c-1")])), \
         patch("services.analytics_service.load_course_bundles", AsyncMock(return_value=[])):
        assert await analytics_service.get_aggregated_analytics(client, "tok") is None


@pytest.mark.asyncio
async def test_aggregated_analytics(client, two_student_bundle, now):
    other = bundle(course("c-2"), [work("w-9")], [person("s-z")])
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[course("c-1"), course("c-2")])), \
         patch("services.analytics_service.load_course_bundles", AsyncMock(return_value=[two_student_bundle, other])):
        result = await analytics_service.get_aggregated_analytics(client, "tok", now=now)

    assert result.course_id == "all"
    assert result.summary.total_students == 3
    assert len(result.assignment_stats) == 3


# ---------------------------------------------------------------------------
# School views
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_school_analytics(client, two_student_bundle, now):
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[course("c-1")])), \
         patch("services.analytics_service.load_course_bundles", AsyncMock(return_value=[two_student_bundle])):
        report = await analytics_service.get_school_analytics(client, "tok", now=now)

    assert report.overview.total_students == 2
    assert report.overview.overall_submission_rate == 50
    assert [s.user_id for s in report.at_risk_students] == ["s-b"]


@pytest.mark.asyncio
async def test_student_detail(client):
    b = bundle(
        course("c-1"),
        [work("w-1")],
        [person("s-1", "Ivy")],
        submissions=[sub("s-1", "w-1", update_time=ts(2025, 3, 1))],
    )
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[b.course])), \
         patch("services.analytics_service.load_course_bundles", AsyncMock(return_value=[b])):
        detail = await analytics_service.get_student_detail(client, "tok", "s-1")
        with pytest.raises(StudentNotFoundError):
            await analytics_service.get_student_detail(client, "tok", "s-404")

    assert detail.overall_submission_rate == 100


@pytest.mark.asyncio
async def test_teacher_detail(client, two_student_bundle):
    with patch("services.analytics_service.list_courses", AsyncMock(return_value=[two_student_bundle.course])), \
         patch("services.analytics_service.load_course_bundles", AsyncMock(return_value=[two_student_bundle])):
        detail = await analytics_service.get_teacher_detail(client, "tok", "t-1")

    assert detail.total_courses == 1
    assert detail.average_submission_rate == 50
