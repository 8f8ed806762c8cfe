"""
Service-layer errors.

Services raise these instead of `HTTPException` so they stay framework-agnostic; routes
translate them with `status_code` and `message`.
"""


class LessonsError(Exception):
    """Base class for expected, client-visible service failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(LessonsError):
    status_code = 400


class Forbidden(LessonsError):
    status_code = 403


class NotFound(LessonsError):
    status_code = 404


class Conflict(LessonsError):
    status_code = 409


class UpstreamFailure(LessonsError):
    """An external provider (payments) failed or timed out."""

    status_code = 502
