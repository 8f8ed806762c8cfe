"""
Contributor Service.

Maintains the contributor leaderboard. `Contributor.lessons` is authoritative and is
written in exactly one place: `record_authorship()`, called when a lesson is created.
Registration through `create_contributor()` always starts the counter at zero.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from life_lessons.config import Settings
from life_lessons.database import CONTRIBUTORS_COLLECTION, DatabaseManager
from life_lessons.managers.logging_manager import get_logger
from life_lessons.models.contributor_models import CreateContributorRequest
from life_lessons.services.errors import Conflict

logger = get_logger(name="contributors", prefix="[CONTRIBUTOR_SERVICE]")


class ContributorService:
    """Reads and writes the `contributors` collection."""

    def __init__(self, db_manager: DatabaseManager, settings: Settings):
        self.db_manager = db_manager
        self.settings = settings

    @property
    def collection(self):
        return self.db_manager.get_collection(CONTRIBUTORS_COLLECTION)

    async def record_authorship(self, name: str, avatar: Optional[str] = None) -> None:
        """
        Count one more lesson for `name`, creating the contributor on first sight.

        A single upsert keeps this atomic: concurrent first lessons by the same author
        converge on one document with the summed count.
        """
        await self.collection.update_one(
            {"name": name},
            {
                "$setOnInsert": {
                    "name": name,
                    "avatar": avatar or "",
                    "createdAt": datetime.now(timezone.utc),
                },
                "$inc": {"lessons": 1},
            },
            upsert=True,
        )
        logger.info("Recorded lesson authorship for contributor %s", name)

    async def list_contributors(self) -> List[Dict[str, Any]]:
        """All contributors, highest lesson count first."""
        cursor = self.collection.find({}).sort("lessons", DESCENDING)
        return await cursor.to_list(length=None)

    async def create_contributor(self, request: CreateContributorRequest) -> ObjectId:
        """
        Register a contributor.

        Raises:
            Conflict: If a contributor with the same name already exists.
        """
        contributor = {
            "name": (request.name or "").strip() or self.settings.DEFAULT_AUTHOR_NAME,
            "avatar": request.avatar or "",
            "lessons": 0,
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            result = await self.collection.insert_one(contributor)
        except DuplicateKeyError:
            raise Conflict(f"Contributor '{contributor['name']}' already exists")

        logger.info("Created contributor %s (%s)", contributor["name"], result.inserted_id)
        return result.inserted_id
