"""Analytics API: teacher, school and drill-down reports.

The caller's Google OAuth access token is read from the ``Authorization``
header and passed explicitly to every provider call.
"""

from __future__ import annotations

import logging
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, Header, HTTPException

from errors import EntityNotFoundError, ProviderFetchError
from models.analytics import CourseAnalytics, SchoolAnalytics, StudentDetail, TeacherDetail
from models.classroom import Course
from services import analytics_service
from services.classroom_client import ClassroomClient, get_classroom_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

T = TypeVar("T")


def get_access_token(authorization: str | None = Header(default=None)) -> str:
    """Extract the bearer token; 401 when absent."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return token.strip()


def get_client() -> ClassroomClient:
    return get_classroom_client()


async def _run(call: Awaitable[T]) -> T:
    """Await an analytics call, translating domain errors to HTTP errors."""
    try:
        return await call
    except ProviderFetchError as exc:
        logger.warning("Provider fetch failed: %s", exc)
        status = exc.status_code if exc.status_code in (401, 403) else 502
        raise HTTPException(status_code=status, detail=str(exc)) from exc
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/courses", response_model=list[Course])
async def teacher_courses(
    token: str = Depends(get_access_token),
    client: ClassroomClient = Depends(get_client),
):
    """Courses the caller teaches."""
    return await _run(analytics_service.get_teacher_courses(client, token))


@router.get("/courses/{course_id}", response_model=CourseAnalytics)
async def course_analytics(
    course_id: str,
    token: str = Depends(get_access_token),
    client: ClassroomClient = Depends(get_client),
):
    return await _run(analytics_service.get_course_analytics(client, token, course_id))


@router.get("/teacher", response_model=CourseAnalytics | None)
async def teacher_analytics(
    token: str = Depends(get_access_token),
    client: ClassroomClient = Depends(get_client),
):
    """All of the caller's courses merged; ``null`` when there is no data."""
    return await _run(analytics_service.get_aggregated_analytics(client, token))


@router.get("/school", response_model=SchoolAnalytics)
async def school_analytics(
    token: str = Depends(get_access_token),
    client: ClassroomClient = Depends(get_client),
):
    return await _run(analytics_service.get_school_analytics(client, token))


@router.get("/students/{student_id}", response_model=StudentDetail)
async def student_detail(
    student_id: str,
    token: str = Depends(get_access_token),
    client: ClassroomClient = Depends(get_client),
):
    return await _run(analytics_service.get_student_detail(client, token, student_id))


@router.get("/teachers/{teacher_id}", response_model=TeacherDetail)
async def teacher_detail(
    teacher_id: str,
    token: str = Depends(get_access_token),
    client: ClassroomClient = Depends(get_client),
):
    return await _run(analytics_service.get_teacher_detail(client, token, teacher_id))
