"""
Contributor Models.

A contributor is the per-author record behind the "top contributors" leaderboard. Its
`lessons` counter is maintained by the lesson-creation upsert and cannot be seeded by clients.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from life_lessons.models.lesson_models import ObjectIdStr


class CreateContributorRequest(BaseModel):
    """
    Request to register a contributor ahead of their first lesson.

    Example:
        {
            "name": "Jane Doe",
            "avatar": "https://example.com/jane.png"
        }
    """

    name: Optional[str] = Field(None, max_length=100, description="Display name")
    avatar: Optional[str] = Field(None, description="Avatar URL")


class ContributorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: ObjectIdStr = Field(..., alias="_id")
    name: str
    avatar: str = ""
    lessons: int = 0
    created_at: Optional[datetime] = Field(None, alias="createdAt")
