"""FastAPI endpoint tests using httpx.AsyncClient."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from api.analytics import get_client
from errors import ProviderFetchError, StudentNotFoundError
from main import app
from services.course_analytics import compute_course_analytics
from services.school_analytics import compute_school_analytics
from tests.factories import course

AUTH = {"Authorization": "Bearer tok-123"}


@pytest.fixture
async def client():
    fake = MagicMock()
    app.dependency_overrides[get_client] = lambda: fake
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data == {"status": "healthy"}


@pytest.mark.asyncio
async def test_missing_token(client):
    resp = await client.get("/api/analytics/school")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_non_bearer_token(client):
    resp = await client.get("/api/analytics/school", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


# ── Teacher endpoints ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_teacher_courses(client):
    mock = AsyncMock(return_value=[course("c-1", "Algebra")])
    with patch("services.analytics_service.get_teacher_courses", mock):
        resp = await client.get("/api/analytics/courses", headers=AUTH)

    assert resp.status_code == 200
    assert resp.json()[0]["courseState"] == "ACTIVE"
    assert mock.call_args.args[1] == "tok-123"


@pytest.mark.asyncio
async def test_course_analytics(client, two_student_bundle, now):
    result = compute_course_analytics(two_student_bundle, now)
    with patch("services.analytics_service.get_course_analytics", AsyncMock(return_value=result)):
        resp = await client.get("/api/analytics/courses/c-1", headers=AUTH)

    assert resp.status_code == 200
    data = resp.json()
    assert data["courseId"] == "c-1"
    assert data["summary"]["totalSubmissions"] == 2
    assert data["studentProgress"][1]["status"] == "inactive"


@pytest.mark.asyncio
async def test_teacher_analytics_null(client):
    with patch("services.analytics_service.get_aggregated_analytics", AsyncMock(return_value=None)):
        resp = await client.get("/api/analytics/teacher", headers=AUTH)

    assert resp.status_code == 200
    assert resp.json() is None


# ── School endpoints ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_school_analytics(client, two_student_bundle, now):
    report = compute_school_analytics([two_student_bundle], now)
    with patch("services.analytics_service.get_school_analytics", AsyncMock(return_value=report)):
        resp = await client.get("/api/analytics/school", headers=AUTH)

    assert resp.status_code == 200
    data = resp.json()
    assert data["overview"]["overallSubmissionRate"] == 50
    assert len(data["engagementData"]) == 30
    assert "atRiskStudents" in data


@pytest.mark.asyncio
async def test_provider_failure_maps_to_502(client):
    failing = AsyncMock(side_effect=ProviderFetchError("course list", "boom", 500))
    with patch("services.analytics_service.get_school_analytics", failing):
        resp = await client.get("/api/analytics/school", headers=AUTH)

    assert resp.status_code == 502
    assert "course list" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_provider_auth_failure_passes_through(client):
    failing = AsyncMock(side_effect=ProviderFetchError("course list", "expired", 401))
    with patch("services.analytics_service.get_school_analytics", failing):
        resp = await client.get("/api/analytics/school", headers=AUTH)

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_student_not_found(client):
    failing = AsyncMock(side_effect=StudentNotFoundError("s-404"))
    with patch("services.analytics_service.get_student_detail", failing):
        resp = await client.get("/api/analytics/students/s-404", headers=AUTH)

    assert resp.status_code == 404
    assert "s-404" in resp.json()["detail"]
