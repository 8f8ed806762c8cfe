"""
System Routes.

- `GET /` - Plain-text liveness banner
- `GET /health` - Database connectivity check (200 healthy, 503 otherwise)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from life_lessons.database import DatabaseManager
from life_lessons.managers.logging_manager import get_logger
from life_lessons.routes.dependencies import get_db_manager

logger = get_logger(prefix="[System Routes]")

router = APIRouter(tags=["system"])


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello from Server.."


@router.get(
    "/health",
    responses={
        200: {"description": "Database reachable"},
        503: {"description": "Database unreachable"},
    },
)
async def health_check(db_manager: DatabaseManager = Depends(get_db_manager)):
    """
    Ping the database.

    **Return Codes:**
    - **200 OK**: `{"status": "healthy", "database": "connected"}`
    - **503 Service Unavailable**: `{"status": "unhealthy", "database": "disconnected"}`
    """
    if await db_manager.health_check():
        return {"status": "healthy", "database": "connected"}

    logger.warning("Health check failed: database unreachable")
    return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "disconnected"})
