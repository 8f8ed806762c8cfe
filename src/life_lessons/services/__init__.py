"""
Service layer.

Services own the store calls and raise `LessonsError` subclasses; routes translate those
into HTTP responses.
"""

from life_lessons.services.checkout_service import CheckoutService
from life_lessons.services.contributor_service import ContributorService
from life_lessons.services.errors import (
    Conflict,
    Forbidden,
    LessonsError,
    NotFound,
    UpstreamFailure,
    ValidationFailed,
)
from life_lessons.services.lesson_service import LessonService

__all__ = [
    "CheckoutService",
    "Conflict",
    "ContributorService",
    "Forbidden",
    "LessonService",
    "LessonsError",
    "NotFound",
    "UpstreamFailure",
    "ValidationFailed",
]
