"""Base exceptions for starship-server.

Every failure surfaced to a client inherits from StarshipError and carries a
stable machine-readable error code, a human readable message and optional
structured details. Store and storage internals never leak through these.
"""

from typing import Any, Dict, Optional


class StarshipError(Exception):
    """Base exception for all starship errors."""

    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    @property
    def status_code(self) -> int:
        from .http_mapping import get_http_status_code
        return get_http_status_code(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


def create_error_response(exception: StarshipError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The starship exception

    Returns:
        Error response dictionary
    """
    return {"error": exception.to_dict()}
