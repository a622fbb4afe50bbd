"""
Application error types.

Services and dependencies raise these instead of HTTPException so the
transport mapping lives in one place (the handlers registered in main.py).
"""

from starlette import status


class AppError(Exception):
    """
    Base error carrying a kind, an HTTP status and a client-safe message.

    Args:
        detail: Message returned to the client
    """
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind!r}, status_code={self.status_code}, detail={self.detail!r})"


class UnauthorizedError(AppError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class ConflictError(AppError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class NotFoundError(AppError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationFailedError(AppError):
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation error"


class InternalError(AppError):
    pass
