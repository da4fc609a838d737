"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .base import StarshipError
from .domain import (
    BadSessionError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    StoreError,
    ValidationError,
)


HTTP_STATUS_MAP: Dict[Type[StarshipError], int] = {
    # 400 Bad Request
    ValidationError: 400,

    # 401 Unauthorized
    BadSessionError: 401,

    # 403 Forbidden
    ForbiddenError: 403,

    # 404 Not Found
    NotFoundError: 404,

    # 409 Conflict
    ConflictError: 409,

    # 500 Internal Server Error
    StoreError: 500,

    # 502 Bad Gateway
    StorageError: 502,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception, walking its class hierarchy.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code, 500 for anything unmapped
    """
    for cls in type(exception).__mro__:
        if cls in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[cls]
    return 500
