from .protocols import ObjectHead, ObjectStorage

__all__ = ["ObjectHead", "ObjectStorage"]
