"""Exception hierarchy for starship-server."""

from .base import StarshipError, create_error_response
from .domain import (
    BadSessionError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    StoreError,
    ValidationError,
)
from .http_mapping import HTTP_STATUS_MAP, get_http_status_code

__all__ = [
    "StarshipError",
    "create_error_response",
    "BadSessionError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "StorageError",
    "StoreError",
    "ValidationError",
    "HTTP_STATUS_MAP",
    "get_http_status_code",
]
