"""
# Lesson Routes

REST endpoints for lessons and their engagement state (counters, comments, replies,
comment likes). Each handler makes exactly one service call; the service performs the
store operation.

## API Endpoints

### Lessons
- `POST /lessons` - Create a lesson (member)
- `GET /lessons?limit=` - List lessons, newest first
- `GET /lessons-worth` - Top 5 most saved lessons
- `GET /lessons/{id}` - Read one lesson with `authorLessonCount`
- `PUT /lessons/{id}` - Update own lesson (member, author or admin)
- `DELETE /lessons/{id}` - Delete own lesson (member, author or admin)

### Engagement
- `POST /lessons/{id}/view|like|save|share` - Increment a counter
- `POST /lessons/{id}/comments` - Add a comment (member)
- `POST /lessons/{id}/comments/{cid}/replies` - Reply to a comment (member)
- `POST /lessons/{id}/comments/{cid}/like` - Like a comment

## Usage Examples

```python
response = await client.post(
    "/lessons",
    json={"title": "Patience compounds", "content": "...", "image": "https://..."},
    headers={"Authorization": f"Bearer {token}"},
)
lesson_id = response.json()["insertedId"]

await client.post(f"/lessons/{lesson_id}/like")
```

Attributes:
    router (APIRouter): FastAPI router tagged `lessons`
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from life_lessons.managers.logging_manager import get_logger
from life_lessons.models.lesson_models import (
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
from life_lessons.routes.dependencies import AccessLevel, get_lesson_service, require_access
from life_lessons.services.errors import LessonsError
from life_lessons.services.lesson_service import LessonService, parse_limit

logger = get_logger(prefix="[Lesson Routes]")

router = APIRouter(tags=["lessons"])

PUBLIC = [Depends(require_access(AccessLevel.PUBLIC))]


def _http_error(error: LessonsError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


# Lesson CRUD


@router.post("/lessons", response_model=InsertResponse)
async def create_lesson(
    request: CreateLessonRequest,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.MEMBER)),
    lessons: LessonService = Depends(get_lesson_service),
):
    """
    Create a new lesson.

    The server initialises `likes`, `views`, `saves` and `shares` to 0, starts an empty
    comment thread, stamps `createdAt`/`updatedAt` and records the caller's email as
    `authorEmail`. The author's contributor record is created or incremented.

    Args:
        request (CreateLessonRequest): Title, content, image and optional display fields.
        caller (dict): The verified caller.

    Returns:
        InsertResponse: `{"acknowledged": true, "insertedId": "<id>"}`

    Raises:
        HTTPException(400): If title or content is missing or blank.
        HTTPException(401): If the caller is not authenticated.
    """
    try:
        lesson_id = await lessons.create_lesson(request, caller)
        return InsertResponse(inserted_id=lesson_id)

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to create lesson: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create lesson")


@router.get("/lessons", response_model=List[LessonResponse], dependencies=PUBLIC)
async def list_lessons(
    limit: Optional[str] = Query(None, description="Positive integer cap; anything else returns all lessons"),
    lessons: LessonService = Depends(get_lesson_service),
):
    """
    List lessons, newest first.

    `limit` is applied only when it is a positive integer. Missing, zero, negative or
    non-numeric values return every lesson.
    """
    try:
        return await lessons.list_lessons(parse_limit(limit))

    except Exception as e:
        logger.error("Failed to list lessons: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to get lessons")


@router.get("/lessons-worth", response_model=List[LessonResponse], dependencies=PUBLIC)
async def top_saved_lessons(lessons: LessonService = Depends(get_lesson_service)):
    """The five most saved lessons, highest `saves` first."""
    try:
        return await lessons.top_saved()

    except Exception as e:
        logger.error("Failed to get top saved lessons: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to get top lessons")


@router.get("/lessons/{lesson_id}", response_model=LessonDetailResponse, dependencies=PUBLIC)
async def get_lesson(lesson_id: str, lessons: LessonService = Depends(get_lesson_service)):
    """
    Get one lesson.

    The response carries `authorLessonCount`, the number of stored lessons with the same
    `author` value.

    Raises:
        HTTPException(404): If the identifier is malformed or unknown.
    """
    try:
        return await lessons.get_lesson(lesson_id)

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to get lesson %s: %s", lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to get lesson")


@router.put("/lessons/{lesson_id}", response_model=UpdateLessonResponse)
async def update_lesson(
    lesson_id: str,
    request: UpdateLessonRequest,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.MEMBER)),
    lessons: LessonService = Depends(get_lesson_service),
):
    """
    Update the provided fields of a lesson.

    **Access Control:** the lesson's author or an admin.

    Raises:
        HTTPException(400): If no editable field was sent.
        HTTPException(403): If the caller does not own the lesson.
        HTTPException(404): If the lesson does not exist.
    """
    try:
        modified = await lessons.update_lesson(lesson_id, request, caller)
        return UpdateLessonResponse(modified_count=modified)

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to update lesson %s: %s", lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update lesson")


@router.delete("/lessons/{lesson_id}", response_model=DeleteLessonResponse)
async def delete_lesson(
    lesson_id: str,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.MEMBER)),
    lessons: LessonService = Depends(get_lesson_service),
):
    """
    Delete a lesson.

    **Access Control:** the lesson's author or an admin.
    """
    try:
        deleted = await lessons.delete_lesson(lesson_id, caller)
        return DeleteLessonResponse(deleted_count=deleted)

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to delete lesson %s: %s", lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete lesson")


# Counters


async def _increment(lessons: LessonService, lesson_id: str, counter: LessonCounter) -> None:
    try:
        await lessons.increment_counter(lesson_id, counter)
    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to increment %s on lesson %s: %s", counter.value, lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update {counter.value}")


@router.post(
    "/lessons/{lesson_id}/view", response_model=ActionResponse, response_model_exclude_none=True, dependencies=PUBLIC
)
async def view_lesson(lesson_id: str, lessons: LessonService = Depends(get_lesson_service)):
    """Count one view. Not idempotent."""
    await _increment(lessons, lesson_id, LessonCounter.VIEWS)
    return ActionResponse()


@router.post(
    "/lessons/{lesson_id}/like", response_model=ActionResponse, response_model_exclude_none=True, dependencies=PUBLIC
)
async def like_lesson(lesson_id: str, lessons: LessonService = Depends(get_lesson_service)):
    await _increment(lessons, lesson_id, LessonCounter.LIKES)
    return ActionResponse()


@router.post(
    "/lessons/{lesson_id}/save", response_model=ActionResponse, response_model_exclude_none=True, dependencies=PUBLIC
)
async def save_lesson(lesson_id: str, lessons: LessonService = Depends(get_lesson_service)):
    await _increment(lessons, lesson_id, LessonCounter.SAVES)
    return ActionResponse()


@router.post(
    "/lessons/{lesson_id}/share", response_model=ActionResponse, response_model_exclude_none=True, dependencies=PUBLIC
)
async def share_lesson(lesson_id: str, lessons: LessonService = Depends(get_lesson_service)):
    await _increment(lessons, lesson_id, LessonCounter.SHARES)
    return ActionResponse(message="Lesson shared!")


# Comments


@router.post("/lessons/{lesson_id}/comments", response_model=CommentResponse)
async def add_comment(
    lesson_id: str,
    request: CreateCommentRequest,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.MEMBER)),
    lessons: LessonService = Depends(get_lesson_service),
):
    """
    Append a comment to a lesson.

    The comment's `user` is the verified caller email.

    Raises:
        HTTPException(400): `"Comment text required"` when `text` is missing or blank.
        HTTPException(404): If the lesson does not exist.
    """
    try:
        return await lessons.add_comment(lesson_id, request.text, caller["email"])

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to add comment to lesson %s: %s", lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add comment")


@router.post(
    "/lessons/{lesson_id}/comments/{comment_id}/replies",
    response_model=ReplyResponse,
)
async def add_reply(
    lesson_id: str,
    comment_id: str,
    request: CreateReplyRequest,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.MEMBER)),
    lessons: LessonService = Depends(get_lesson_service),
):
    """
    Reply to one comment of a lesson.

    Raises:
        HTTPException(400): `"Reply text required"` when `text` is missing or blank.
        HTTPException(404): If the lesson or the comment does not exist.
    """
    try:
        return await lessons.add_reply(lesson_id, comment_id, request.text, caller["email"])

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to add reply to comment %s on lesson %s: %s", comment_id, lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to add reply")


@router.post(
    "/lessons/{lesson_id}/comments/{comment_id}/like",
    response_model=ActionResponse,
    response_model_exclude_none=True,
    dependencies=PUBLIC,
)
async def like_comment(
    lesson_id: str,
    comment_id: str,
    lessons: LessonService = Depends(get_lesson_service),
):
    """Add one like to a comment. Sibling comments are untouched."""
    try:
        await lessons.like_comment(lesson_id, comment_id)
        return ActionResponse()

    except LessonsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error("Failed to like comment %s on lesson %s: %s", comment_id, lesson_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to like comment")
