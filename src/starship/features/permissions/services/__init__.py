from .permission_service import PermissionService

__all__ = ["PermissionService"]
