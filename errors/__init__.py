"""Custom exception hierarchy for Classroom Insights."""

from errors.exceptions import (
    AnalyticsError,
    EntityNotFoundError,
    ProviderFetchError,
    StudentNotFoundError,
    TeacherNotFoundError,
)

__all__ = [
    "AnalyticsError",
    "EntityNotFoundError",
    "ProviderFetchError",
    "StudentNotFoundError",
    "TeacherNotFoundError",
]
