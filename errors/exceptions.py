"""Domain-specific exceptions for Classroom Insights.

These exceptions let the API layer distinguish between a provider outage
that makes a whole report impossible and a lookup that simply found nothing.
Partial provider failures (one course, one roster, one assignment's
submissions) never surface here; the data loader substitutes empty results.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for analytics errors."""


class ProviderFetchError(AnalyticsError):
    """A required top-level fetch from Google Classroom failed.

    ``status_code`` mirrors the provider's HTTP status when one was received
    (``0`` for transport failures) so callers can tell an expired token from
    an outage.
    """

    def __init__(self, resource: str, message: str, status_code: int = 0) -> None:
        self.resource = resource
        self.status_code = status_code
        super().__init__(f"Failed to fetch {resource}: {message}")


class EntityNotFoundError(AnalyticsError):
    """A referenced person does not appear in any active course."""

    def __init__(self, entity_id: str, entity_type: str = "entity") -> None:
        self.entity_id = entity_id
        self.entity_type = entity_type
        super().__init__(f"{entity_type} '{entity_id}' not found in any course")


class StudentNotFoundError(EntityNotFoundError):
    def __init__(self, student_id: str) -> None:
        super().__init__(student_id, entity_type="Student")


class TeacherNotFoundError(EntityNotFoundError):
    def __init__(self, teacher_id: str) -> None:
        super().__init__(teacher_id, entity_type="Teacher")
