from . import download, system

__all__ = ["download", "system"]
