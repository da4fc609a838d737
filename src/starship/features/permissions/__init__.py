"""Permission engine."""

from .services import PermissionService

__all__ = ["PermissionService"]
