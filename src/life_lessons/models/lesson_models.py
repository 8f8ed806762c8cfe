"""
# Lesson Models

Pydantic models for the lesson, comment and reply endpoints.

## Storage vs. API shape

Lessons are stored with camelCase keys (`authorAvatar`, `createdAt`, ...) and a BSON
`ObjectId` under `_id`. The models expose snake_case attributes in Python and use aliases so
the JSON on the wire keeps the stored key names. `ObjectId` values are turned into strings
by the `ObjectIdStr` type.

## Thread Shape

```
Lesson
 └── comments: [Comment]        (append-only)
      └── replies: [Reply]      (append-only, no further nesting)
```

## Module Attributes

Attributes:
    COUNTER_FIELDS (Tuple[str, ...]): Lesson counters that can be incremented.
    EDITABLE_FIELDS (Tuple[str, ...]): Stored keys an update request may `$set`.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

ObjectIdStr = Annotated[str, BeforeValidator(str)]


class LessonCounter(str, Enum):
    """Lesson counters and the action path segment that bumps them."""

    VIEWS = "views"
    LIKES = "likes"
    SAVES = "saves"
    SHARES = "shares"


COUNTER_FIELDS = tuple(counter.value for counter in LessonCounter)

EDITABLE_FIELDS = ("title", "content", "image", "category", "emotionalTone", "visibility", "accessLevel")


def _strip_optional(v: Optional[str]) -> Optional[str]:
    return v.strip() if isinstance(v, str) else v


class CreateLessonRequest(BaseModel):
    """
    Request model for publishing a new lesson.

    `title` and `content` must contain non-whitespace text. The author's display name and
    avatar are optional; the service fills the configured defaults when they are absent.
    Counters, comments and timestamps are always set by the server.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200, description="Lesson title")
    content: str = Field(..., min_length=1, description="Lesson body")
    image: Optional[str] = Field(None, description="Cover image URL")
    category: Optional[str] = Field(None, max_length=50, description="Free-form category")
    emotional_tone: Optional[str] = Field(None, alias="emotionalTone", max_length=50)
    visibility: Optional[str] = Field(None, max_length=20)
    access_level: Optional[str] = Field(None, alias="accessLevel", max_length=20)
    author: Optional[str] = Field(None, max_length=100, description="Author display name")
    author_avatar: Optional[str] = Field(None, alias="authorAvatar", description="Author avatar URL")

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("author", "author_avatar")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        v = _strip_optional(v)
        return v or None


class UpdateLessonRequest(BaseModel):
    """
    Request model for a partial lesson update.

    Only the fields present in the request are written. Counters, comments, author and
    timestamps cannot be changed through this model.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    emotional_tone: Optional[str] = Field(None, alias="emotionalTone", max_length=50)
    visibility: Optional[str] = Field(None, max_length=20)
    access_level: Optional[str] = Field(None, alias="accessLevel", max_length=20)

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    def to_update_fields(self) -> dict:
        """Stored-key dict of the fields the client actually sent."""
        fields = self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        return {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}


class CreateCommentRequest(BaseModel):
    """
    Body of a new comment.

    `text` is optional at the schema level so that a missing or blank text reaches the
    handler and is reported as `"Comment text required"`.
    """

    text: Optional[str] = Field(None, max_length=2000, description="Comment text")


class CreateReplyRequest(BaseModel):
    """Body of a new reply. Same rules as `CreateCommentRequest`."""

    text: Optional[str] = Field(None, max_length=2000, description="Reply text")


class ReplyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(..., alias="_id")
    user: Optional[str] = None
    text: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class CommentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(..., alias="_id")
    user: Optional[str] = None
    text: str
    likes: int = 0
    replies: List[ReplyResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class LessonResponse(BaseModel):
    """
    A lesson as returned by the listing and lookup endpoints.

    Unknown stored keys are passed through unchanged so older documents with extra
    free-form fields still round-trip. `authorEmail` is accepted from the stored document
    but never serialised, since these endpoints are public.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: ObjectIdStr = Field(..., alias="_id")
    title: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    author: str
    author_avatar: str = Field(..., alias="authorAvatar")
    author_email: Optional[str] = Field(None, alias="authorEmail", exclude=True)
    likes: int = 0
    views: int = 0
    saves: int = 0
    shares: int = 0
    comments: List[CommentResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class LessonDetailResponse(LessonResponse):
    """A single lesson plus how many stored lessons share its `author`."""

    author_lesson_count: int = Field(0, alias="authorLessonCount")


class InsertResponse(BaseModel):
    """Insertion acknowledgement, mirroring the driver's `InsertOneResult`."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    inserted_id: ObjectIdStr = Field(..., alias="insertedId")


class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class UpdateLessonResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    modified_count: int = Field(..., alias="modifiedCount")


class DeleteLessonResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    deleted_count: int = Field(..., alias="deletedCount")
