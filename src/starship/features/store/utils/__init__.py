from .codec import decode_value, encode_value
from .documents import apply_update, get_path, match_document, paginate, positional_index, sort_documents

__all__ = ["decode_value", "encode_value", "apply_update", "get_path", "match_document", "paginate", "positional_index", "sort_documents"]
