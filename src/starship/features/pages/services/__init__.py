from .page_service import PageService

__all__ = ["PageService"]
