from .wiki_service import WikiService

__all__ = ["WikiService"]
