from .wiki import Wiki, WikiPage

__all__ = ["Wiki", "WikiPage"]
