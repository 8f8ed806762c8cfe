"""
# Lesson Service

Business logic behind the lesson routes. Every public method performs **one** store
operation against the `lessons` collection (update and delete first load the lesson to run
the ownership check).

## Operations

| Method | Store call |
|--------|------------|
| `create_lesson` | `insert_one` (+ contributor upsert) |
| `list_lessons` | `find().sort(_id desc).limit(n)` |
| `get_lesson` | `find_one` + `count_documents` by author |
| `top_saved` | `find().sort(saves desc).limit(5)` |
| `increment_counter` | `update_one` with `$inc` |
| `add_comment` | `update_one` with `$push: {comments: ...}` |
| `add_reply` | `update_one` positional `$push: {"comments.$.replies": ...}` |
| `like_comment` | `update_one` positional `$inc: {"comments.$.likes": 1}` |
| `update_lesson` | `find_one` + `update_one` with `$set` |
| `delete_lesson` | `find_one` + `delete_one` |

## Concurrency

Nested writes filter on both the lesson `_id` and `comments._id` in the same
`update_one`, so a reply lands in exactly the matched comment even while other requests
write to sibling comments of the same lesson. Counter `$inc`s commute.

## Not-found Handling

Any identifier that is malformed or matches no document raises `NotFound`. A mutation
never reports success when it matched zero documents.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING

from life_lessons.config import Settings
from life_lessons.database import LESSONS_COLLECTION, DatabaseManager
from life_lessons.managers.logging_manager import get_logger
from life_lessons.models.lesson_models import (
    COUNTER_FIELDS,
    CreateLessonRequest,
    LessonCounter,
    UpdateLessonRequest,
)
from life_lessons.services.contributor_service import ContributorService
from life_lessons.services.errors import Forbidden, NotFound, ValidationFailed

logger = get_logger(name="lessons", prefix="[LESSON_SERVICE]")

TOP_SAVED_LIMIT = 5


def parse_object_id(value: str, what: str = "Lesson") -> ObjectId:
    """
    Convert a path identifier into an `ObjectId`.

    Raises:
        NotFound: If `value` is not a valid ObjectId. A malformed id can never match a
            document, so it is reported the same way as an unknown one.
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFound(f"{what} not found")


def parse_limit(raw: Optional[str]) -> Optional[int]:
    """
    Interpret the `limit` query parameter.

    Returns the limit only when `raw` is a positive integer; anything else means "no limit".
    """
    if raw is None:
        return None
    try:
        limit = int(raw.strip())
    except ValueError:
        return None
    return limit if limit > 0 else None


def require_text(text: Optional[str], message: str) -> str:
    """Return stripped `text`, or raise `ValidationFailed(message)` when it is missing or blank."""
    if text is None or not text.strip():
        raise ValidationFailed(message)
    return text.strip()


def can_modify_lesson(lesson: Dict[str, Any], caller: Dict[str, Any]) -> bool:
    """Ownership policy: the lesson's author or an admin may edit or delete it."""
    if caller.get("is_admin"):
        return True
    author_email = lesson.get("authorEmail")
    return bool(author_email) and author_email.lower() == (caller.get("email") or "").lower()


class LessonService:
    """
    Reads and writes lesson documents.

    Args:
        db_manager (DatabaseManager): The connected database manager.
        settings (Settings): Used for author/avatar defaults.
        contributors (Optional[ContributorService]): Leaderboard service; built from the
            same manager when omitted.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        settings: Settings,
        contributors: Optional[ContributorService] = None,
    ):
        self.db_manager = db_manager
        self.settings = settings
        self.contributors = contributors or ContributorService(db_manager, settings)

    @property
    def collection(self):
        return self.db_manager.get_collection(LESSONS_COLLECTION)

    def apply_defaults(self, lesson: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in the display defaults for lessons stored without an author or avatar."""
        lesson["author"] = lesson.get("author") or self.settings.DEFAULT_AUTHOR_NAME
        lesson["authorAvatar"] = lesson.get("authorAvatar") or self.settings.DEFAULT_AUTHOR_AVATAR
        return lesson

    # Lesson CRUD

    async def create_lesson(self, request: CreateLessonRequest, caller: Dict[str, Any]) -> ObjectId:
        """
        Insert a new lesson and count it towards its author's contributor record.

        Counters start at zero, the comment thread starts empty and both timestamps are set
        to now. The contributor upsert runs after the insert; if it fails the lesson is kept
        and the failure is logged.
        """
        now = datetime.now(timezone.utc)
        author = request.author or self.settings.DEFAULT_AUTHOR_NAME
        avatar = request.author_avatar or self.settings.DEFAULT_AUTHOR_AVATAR

        lesson = request.model_dump(by_alias=True, exclude_none=True, exclude={"author", "author_avatar"})
        lesson.update(
            {
                "author": author,
                "authorAvatar": avatar,
                "authorEmail": caller.get("email"),
                "comments": [],
                "createdAt": now,
                "updatedAt": now,
            }
        )
        for counter in COUNTER_FIELDS:
            lesson[counter] = 0

        result = await self.collection.insert_one(lesson)
        logger.info("Created lesson %s by %s", result.inserted_id, author)

        try:
            await self.contributors.record_authorship(author, avatar)
        except Exception as e:
            logger.error("Failed to record authorship for %s on lesson %s: %s", author, result.inserted_id, e, exc_info=True)

        return result.inserted_id

    async def list_lessons(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Lessons newest first, capped at `limit` when given."""
        cursor = self.collection.find({}).sort("_id", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)
        lessons = await cursor.to_list(length=None)
        return [self.apply_defaults(lesson) for lesson in lessons]

    async def get_lesson(self, lesson_id: str) -> Dict[str, Any]:
        """
        Fetch one lesson with defaults and `authorLessonCount`.

        Raises:
            NotFound: If no lesson has this identifier.
        """
        lesson = await self.collection.find_one({"_id": parse_object_id(lesson_id)})
        if not lesson:
            raise NotFound("Lesson not found")

        self.apply_defaults(lesson)
        lesson["authorLessonCount"] = await self.collection.count_documents({"author": lesson["author"]})
        return lesson

    async def top_saved(self, limit: int = TOP_SAVED_LIMIT) -> List[Dict[str, Any]]:
        """The most saved lessons, highest `saves` first."""
        cursor = self.collection.find({}).sort("saves", DESCENDING).limit(limit)
        lessons = await cursor.to_list(length=None)
        return [self.apply_defaults(lesson) for lesson in lessons]

    async def update_lesson(self, lesson_id: str, request: UpdateLessonRequest, caller: Dict[str, Any]) -> int:
        """
        `$set` the provided fields plus a fresh `updatedAt`.

        Raises:
            ValidationFailed: If the request carries no editable field.
            NotFound: If the lesson does not exist.
            Forbidden: If the caller is neither the author nor an admin.
        """
        fields = request.to_update_fields()
        if not fields:
            raise ValidationFailed("No fields to update")

        oid = parse_object_id(lesson_id)
        await self._load_for_modification(oid, caller)

        fields["updatedAt"] = datetime.now(timezone.utc)
        result = await self.collection.update_one({"_id": oid}, {"$set": fields})
        if result.matched_count == 0:
            raise NotFound("Lesson not found")

        logger.info("Updated lesson %s fields=%s by %s", lesson_id, sorted(fields), caller.get("email"))
        return result.modified_count

    async def delete_lesson(self, lesson_id: str, caller: Dict[str, Any]) -> int:
        """
        Remove a lesson.

        Raises:
            NotFound: If the lesson does not exist.
            Forbidden: If the caller is neither the author nor an admin.
        """
        oid = parse_object_id(lesson_id)
        await self._load_for_modification(oid, caller)

        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound("Lesson not found")

        logger.info("Deleted lesson %s by %s", lesson_id, caller.get("email"))
        return result.deleted_count

    async def _load_for_modification(self, oid: ObjectId, caller: Dict[str, Any]) -> Dict[str, Any]:
        lesson = await self.collection.find_one({"_id": oid})
        if not lesson:
            raise NotFound("Lesson not found")
        if not can_modify_lesson(lesson, caller):
            logger.warning("Caller %s is not allowed to modify lesson %s", caller.get("email"), oid)
            raise Forbidden("Only the author or an admin can modify this lesson")
        return lesson

    # Engagement

    async def increment_counter(self, lesson_id: str, counter: LessonCounter) -> None:
        """
        Add exactly one to a lesson counter.

        Raises:
            NotFound: If the lesson does not exist.
        """
        result = await self.collection.update_one(
            {"_id": parse_object_id(lesson_id)},
            {"$inc": {counter.value: 1}},
        )
        if result.matched_count == 0:
            raise NotFound("Lesson not found")

    async def add_comment(self, lesson_id: str, text: Optional[str], user: Optional[str]) -> Dict[str, Any]:
        """
        Append a comment to a lesson and return it.

        Raises:
            ValidationFailed: If `text` is missing or blank (nothing is written).
            NotFound: If the lesson does not exist.
        """
        text = require_text(text, "Comment text required")
        oid = parse_object_id(lesson_id)

        comment = {
            "_id": ObjectId(),
            "user": user,
            "text": text,
            "likes": 0,
            "replies": [],
            "createdAt": datetime.now(timezone.utc),
        }
        result = await self.collection.update_one({"_id": oid}, {"$push": {"comments": comment}})
        if result.matched_count == 0:
            raise NotFound("Lesson not found")

        logger.info("Added comment %s to lesson %s", comment["_id"], lesson_id)
        return comment

    async def add_reply(
        self, lesson_id: str, comment_id: str, text: Optional[str], user: Optional[str]
    ) -> Dict[str, Any]:
        """
        Append a reply to one comment of a lesson and return it.

        The lesson and the comment are matched in the same filter and the reply is pushed
        through the positional operator, so only that comment's replies change.

        Raises:
            ValidationFailed: If `text` is missing or blank.
            NotFound: If the lesson or the comment does not exist.
        """
        text = require_text(text, "Reply text required")
        oid = parse_object_id(lesson_id)
        cid = parse_object_id(comment_id, "Comment")

        reply = {
            "_id": ObjectId(),
            "user": user,
            "text": text,
            "createdAt": datetime.now(timezone.utc),
        }
        result = await self.collection.update_one(
            {"_id": oid, "comments._id": cid},
            {"$push": {"comments.$.replies": reply}},
        )
        if result.matched_count == 0:
            raise NotFound("Lesson or comment not found")

        logger.info("Added reply %s to comment %s on lesson %s", reply["_id"], comment_id, lesson_id)
        return reply

    async def like_comment(self, lesson_id: str, comment_id: str) -> None:
        """
        Add one like to a single comment.

        Raises:
            NotFound: If the lesson or the comment does not exist.
        """
        result = await self.collection.update_one(
            {"_id": parse_object_id(lesson_id), "comments._id": parse_object_id(comment_id, "Comment")},
            {"$inc": {"comments.$.likes": 1}},
        )
        if result.matched_count == 0:
            raise NotFound("Lesson or comment not found")
