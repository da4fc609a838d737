"""Domain exceptions raised by the permission engine and the services."""

from .base import StarshipError


class NotFoundError(StarshipError):
    """Entity is absent, or the caller may not see it.

    The two cases are deliberately indistinguishable so that private
    resources do not leak their existence.
    """
    default_code = "NOT_FOUND"

    def __init__(self, message: str = "Not found.", **kwargs):
        super().__init__(message, **kwargs)


class ForbiddenError(StarshipError):
    """Entity is visible but the operation is not permitted."""
    default_code = "FORBIDDEN"

    def __init__(self, message: str = "You don't have permission to do that.", **kwargs):
        super().__init__(message, **kwargs)


class BadSessionError(StarshipError):
    """No credential, or an invalid one."""
    default_code = "BAD_SESSION"

    def __init__(self, message: str = "Bad session.", **kwargs):
        super().__init__(message, **kwargs)


class ValidationError(StarshipError):
    """Malformed input: oversized content, invalid names, limits exceeded."""
    default_code = "VALIDATION_ERROR"


class ConflictError(StarshipError):
    """A unique value is already taken."""
    default_code = "CONFLICT"


# Infrastructure Errors
class StoreError(StarshipError):
    """The entity store backend failed. Never retried by the services."""
    default_code = "STORE_ERROR"

    def __init__(self, message: str = "The data store is unavailable.", **kwargs):
        super().__init__(message, **kwargs)


class StorageError(StarshipError):
    """The object storage backend failed outside of a best-effort cascade."""
    default_code = "STORAGE_ERROR"

    def __init__(self, message: str = "The object storage is unavailable.", **kwargs):
        super().__init__(message, **kwargs)
