from .access import ComponentAccess, caller_id

__all__ = ["ComponentAccess", "caller_id"]
