from .names import sanitize_name, storage_key

__all__ = ["sanitize_name", "storage_key"]
