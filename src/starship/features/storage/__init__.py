"""Object storage capability."""

from .adapters import S3ObjectStorage
from .entities import ObjectHead, ObjectStorage

__all__ = ["ObjectHead", "ObjectStorage", "S3ObjectStorage"]
