"""
Contributor Routes.

- `GET /contributors` - Leaderboard, highest lesson count first (public)
- `POST /contributors` - Register a contributor (admin)

Lesson counts are maintained when lessons are created; registration always starts a
contributor at zero.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from life_lessons.managers.logging_manager import get_logger
from life_lessons.models.contributor_models import ContributorResponse, CreateContributorRequest
from life_lessons.models.lesson_models import InsertResponse
from life_lessons.routes.dependencies import AccessLevel, get_contributor_service, require_access
from life_lessons.services.contributor_service import ContributorService
from life_lessons.services.errors import LessonsError

logger = get_logger(prefix="[Contributor Routes]")

router = APIRouter(prefix="/contributors", tags=["contributors"])


@router.get("", response_model=List[ContributorResponse], dependencies=[Depends(require_access(AccessLevel.PUBLIC))])
async def list_contributors(contributors: ContributorService = Depends(get_contributor_service)):
    """All contributors sorted by `lessons` descending. No cap."""
    try:
        return await contributors.list_contributors()

    except Exception as e:
        logger.error("Failed to list contributors: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to get contributors")


@router.post("", response_model=InsertResponse)
async def create_contributor(
    request: CreateContributorRequest,
    caller: Dict[str, Any] = Depends(require_access(AccessLevel.ADMIN)),
    contributors: ContributorService = Depends(get_contributor_service),
):
    """
    Register a contributor.

    `name` defaults to `"Anonymous"` and `avatar` to `""`. The lesson count cannot be
    seeded by the client.

    Raises:
        HTTPException(403): If the caller is not an admin.
        HTTPException(409): If the name is already registered.
    """
    try:
        contributor_id = await contributors.create_contributor(request)
        logger.info("Contributor %s registered by %s", contributor_id, caller["email"])
        return InsertResponse(inserted_id=contributor_id)

    except LessonsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error("Failed to create contributor: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create contributor")
