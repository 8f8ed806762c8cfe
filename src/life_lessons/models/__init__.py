"""
Pydantic models for the Life Lessons API.

- `lesson_models`: lessons, comments, replies and their responses
- `contributor_models`: the contributor leaderboard
- `payment_models`: premium lesson checkout
"""

from life_lessons.models.contributor_models import ContributorResponse, CreateContributorRequest
from life_lessons.models.lesson_models import (
    COUNTER_FIELDS,
    EDITABLE_FIELDS,
    ActionResponse,
    CommentResponse,
    CreateCommentRequest,
    CreateLessonRequest,
    CreateReplyRequest,
    DeleteLessonResponse,
    InsertResponse,
    LessonCounter,
    LessonDetailResponse,
    LessonResponse,
    ReplyResponse,
    UpdateLessonRequest,
    UpdateLessonResponse,
)
from life_lessons.models.payment_models import CheckoutSessionResponse, CreateCheckoutSessionRequest

__all__ = [
    "COUNTER_FIELDS",
    "EDITABLE_FIELDS",
    "ActionResponse",
    "CheckoutSessionResponse",
    "CommentResponse",
    "ContributorResponse",
    "CreateCheckoutSessionRequest",
    "CreateCommentRequest",
    "CreateContributorRequest",
    "CreateLessonRequest",
    "CreateReplyRequest",
    "DeleteLessonResponse",
    "InsertResponse",
    "LessonCounter",
    "LessonDetailResponse",
    "LessonResponse",
    "ReplyResponse",
    "UpdateLessonRequest",
    "UpdateLessonResponse",
]
