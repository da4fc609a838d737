from .base import DocumentEntity, DocumentRepository, generate_id, set_fields, utc_now

__all__ = ["DocumentEntity", "DocumentRepository", "generate_id", "set_fields", "utc_now"]
