"""
# Life Lessons API - Application Entry Point

Builds the FastAPI `app`: lifespan, middleware, exception handlers, routers and metrics.

## Lifespan

`lifespan()` opens the resources every request depends on and stores them on `app.state`:

1.  **Database**: `DatabaseManager.connect()` (retries with exponential backoff), then
    `create_indexes()`.
2.  **Identity**: `IdentityManager` for bearer token verification.
3.  **Payments**: `CheckoutService` with its Razorpay client.

On shutdown the database client is closed.

## Middleware (outermost first)

- `CORSMiddleware` with the configured `CORS_ORIGINS`
- `RequestLoggingMiddleware` (one line per request, `X-Request-ID`)
- `RequestTimeoutMiddleware` (504 after `REQUEST_TIMEOUT_SECONDS`)

## Error Responses

Every error body is `{"message": "..."}`:

| Source | Status |
|--------|--------|
| `HTTPException` | its own status |
| Request validation | 400 |
| Anything else | 500 `"Internal server error"` (details logged, never returned) |

## Running

```bash
uvicorn life_lessons.main:app --reload --host 0.0.0.0 --port 3000
```
"""

from contextlib import asynccontextmanager
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from life_lessons.config import settings
from life_lessons.database import DatabaseManager
from life_lessons.managers.identity_manager import IdentityManager
from life_lessons.managers.logging_manager import get_logger
from life_lessons.middleware.timeout_middleware import RequestTimeoutMiddleware
from life_lessons.routes.contributors import router as contributors_router
from life_lessons.routes.lessons import router as lessons_router
from life_lessons.routes.payments import router as payments_router
from life_lessons.routes.system import router as system_router
from life_lessons.services.checkout_service import CheckoutService
from life_lessons.utils.logging_utils import (
    RequestLoggingMiddleware,
    log_application_lifecycle,
    log_error_with_context,
)

logger = get_logger(prefix="[Main]")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the database, identity and payment resources, then close them on shutdown.

    Args:
        app (FastAPI): The application; resources are attached to `app.state`.

    Raises:
        ConnectionError: If the database stays unreachable after all retries.
    """
    startup_start_time = time.time()

    log_application_lifecycle(
        "startup_initiated",
        {
            "app_name": "Life Lessons API",
            "version": "1.0.0",
            "environment": "production" if settings.is_production else "development",
            "debug_mode": settings.DEBUG,
        },
    )

    db_manager = DatabaseManager(settings)
    try:
        db_connect_start = time.time()
        await db_manager.connect()
        log_application_lifecycle(
            "database_connected",
            {
                "connection_duration": f"{time.time() - db_connect_start:.3f}s",
                "database_name": settings.MONGODB_DATABASE,
                "connection_url": (
                    settings.MONGODB_URL.split("@")[-1] if "@" in settings.MONGODB_URL else settings.MONGODB_URL
                ),
            },
        )

        await db_manager.create_indexes()
        log_application_lifecycle("database_indexes_ready")

    except Exception as e:
        log_error_with_context(e, {"operation": "database_startup"})
        raise

    app.state.db_manager = db_manager
    app.state.identity_manager = IdentityManager(settings)
    app.state.checkout_service = CheckoutService(settings)

    log_application_lifecycle(
        "startup_completed",
        {"startup_duration": f"{time.time() - startup_start_time:.3f}s"},
    )

    try:
        yield
    finally:
        log_application_lifecycle("shutdown_initiated")
        await db_manager.disconnect()
        log_application_lifecycle("shutdown_completed")


app = FastAPI(
    title="Life Lessons API",
    description="""
    Share short life lessons, react to them and discuss them in threaded comments.

    ### Features
    - Lesson publishing with author attribution
    - Views, likes, saves and shares counters
    - Two-level comment threads with comment likes
    - Top contributors leaderboard
    - Hosted checkout for premium lessons
    """,
    version="1.0.0",
    lifespan=lifespan,
    redirect_slashes=False,
    openapi_tags=[
        {"name": "lessons", "description": "Lesson CRUD, counters and comment threads"},
        {"name": "contributors", "description": "Top contributors leaderboard"},
        {"name": "payments", "description": "Premium lesson checkout"},
        {"name": "system", "description": "Liveness and health checks"},
    ],
)


# Exception handlers


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    logger.info("Rejected invalid request %s %s: %s", request.method, request.url.path, problems)
    return JSONResponse(status_code=400, content={"message": "; ".join(problems) or "Invalid request"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log_error_with_context(exc, {"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Middleware (added innermost first)

app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)
app.add_middleware(RequestLoggingMiddleware)

cors_origins = settings.cors_origin_list
logger.info("Configuring CORS with origins: %s", cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)

log_application_lifecycle(
    "middleware_configured",
    {
        "middleware": ["CORSMiddleware", "RequestLoggingMiddleware", "RequestTimeoutMiddleware"],
        "cors_origins": cors_origins,
    },
)

# Routers

routers_config = [
    ("system", system_router, "Liveness and health checks"),
    ("lessons", lessons_router, "Lesson CRUD, counters and comment threads"),
    ("contributors", contributors_router, "Top contributors leaderboard"),
    ("payments", payments_router, "Premium lesson checkout"),
]

included_routers = []
for router_name, router, description in routers_config:
    try:
        app.include_router(router)
        included_routers.append({"name": router_name, "description": description})
        logger.info("Successfully included %s router: %s", router_name, description)
    except Exception as e:
        log_error_with_context(
            e, {"operation": "router_inclusion", "router_name": router_name, "description": description}
        )
        logger.error("Failed to include %s router: %s", router_name, e)

log_application_lifecycle(
    "routers_configured",
    {"total_routers": len(routers_config), "included_routers": len(included_routers), "routers": included_routers},
)

# Prometheus metrics

if settings.METRICS_ENABLED:
    try:
        instrumentator = Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=True,
            should_respect_env_var=False,
            should_instrument_requests_inprogress=True,
        )
        instrumentator.instrument(app).expose(app, include_in_schema=False, endpoint="/metrics")
        log_application_lifecycle("prometheus_configured", {"metrics_endpoint": "/metrics"})

    except Exception as e:
        log_error_with_context(e, {"operation": "prometheus_setup"})
        logger.error("Failed to configure Prometheus metrics: %s", e)


if __name__ == "__main__":
    uvicorn.run("life_lessons.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG, log_level="info")
