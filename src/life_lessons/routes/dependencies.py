"""
# Route Dependencies

FastAPI dependencies shared by every router: the lifespan-managed resources on
`app.state`, the service factories built from them, and the access guards.

## Access Levels

Each route declares its level with `Depends(require_access(AccessLevel.X))`:

| Level | Token | Caller |
|-------|-------|--------|
| `PUBLIC` | optional | `None` or the verified caller |
| `MEMBER` | required | verified caller, else **401** `"Unauthorized Access!"` |
| `ADMIN` | required | verified caller listed in `ADMIN_EMAILS`, else **403** |

An invalid token on a `PUBLIC` route is ignored rather than rejected; public reads never
depend on who is asking.

Attributes:
    bearer_scheme (HTTPBearer): Extracts `Authorization: Bearer <token>` without failing
        when it is absent.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from life_lessons.config import Settings, settings
from life_lessons.database import DatabaseManager
from life_lessons.managers.identity_manager import IdentityManager, InvalidTokenError
from life_lessons.managers.logging_manager import get_logger
from life_lessons.services.checkout_service import CheckoutService
from life_lessons.services.contributor_service import ContributorService
from life_lessons.services.lesson_service import LessonService

logger = get_logger(prefix="[Route Dependencies]")

bearer_scheme = HTTPBearer(auto_error=False)

UNAUTHORIZED_MESSAGE = "Unauthorized Access!"


class AccessLevel(str, Enum):
    PUBLIC = "public"
    MEMBER = "member"
    ADMIN = "admin"


# Resources


def get_settings() -> Settings:
    return settings


def get_db_manager(request: Request) -> DatabaseManager:
    """The `DatabaseManager` opened by the application lifespan."""
    return request.app.state.db_manager


def get_identity_manager(request: Request) -> IdentityManager:
    return request.app.state.identity_manager


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


def get_contributor_service(
    db_manager: DatabaseManager = Depends(get_db_manager),
    app_settings: Settings = Depends(get_settings),
) -> ContributorService:
    return ContributorService(db_manager, app_settings)


def get_lesson_service(
    db_manager: DatabaseManager = Depends(get_db_manager),
    app_settings: Settings = Depends(get_settings),
    contributors: ContributorService = Depends(get_contributor_service),
) -> LessonService:
    return LessonService(db_manager, app_settings, contributors)


# Access guards


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_access_public(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity_manager: IdentityManager = Depends(get_identity_manager),
) -> Optional[Dict[str, Any]]:
    """Resolve the caller when a valid token is present, otherwise `None`."""
    if credentials is None:
        return None
    try:
        return identity_manager.verify_token(credentials.credentials)
    except InvalidTokenError:
        return None


async def require_access_member(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity_manager: IdentityManager = Depends(get_identity_manager),
) -> Dict[str, Any]:
    """
    Require a verified caller.

    Returns:
        dict: `email`, `uid` and `is_admin` of the caller.

    Raises:
        HTTPException(401): If the token is missing, invalid, expired or has no email.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    try:
        return identity_manager.verify_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info("Rejected request with unverifiable token: %s", e)
        raise _unauthorized()


async def require_access_admin(caller: Dict[str, Any] = Depends(require_access_member)) -> Dict[str, Any]:
    """
    Require a verified caller listed in `ADMIN_EMAILS`.

    Raises:
        HTTPException(401): If the caller is not authenticated.
        HTTPException(403): If the caller is not an admin.
    """
    if not caller.get("is_admin"):
        logger.warning("Admin access denied for %s", caller.get("email"))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return caller


ACCESS_GUARDS: Dict[AccessLevel, Callable[..., Any]] = {
    AccessLevel.PUBLIC: require_access_public,
    AccessLevel.MEMBER: require_access_member,
    AccessLevel.ADMIN: require_access_admin,
}


def require_access(level: AccessLevel) -> Callable[..., Any]:
    """The guard dependency for `level`, for use as `Depends(require_access(level))`."""
    return ACCESS_GUARDS[level]
