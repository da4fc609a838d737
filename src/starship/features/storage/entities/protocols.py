"""Object storage protocol.

The services only issue requests through this interface; pre-signed URL
generation and the transfer protocol belong to the backend.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class ObjectHead:
    size: int
    content_type: Optional[str] = None


@runtime_checkable
class ObjectStorage(Protocol):
    """Storage backend contract."""

    @abstractmethod
    async def issue_upload_url(self, key: str, content_type: str, ttl: int) -> str:
        ...

    @abstractmethod
    async def issue_download_url(self, key: str, ttl: int, filename_hint: Optional[str] = None) -> str:
        ...

    @abstractmethod
    async def head_object(self, key: str) -> ObjectHead:
        """Raises NotFoundError when the object was never uploaded."""
        ...

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        ...

    @abstractmethod
    async def delete_objects(self, keys: List[str]) -> None:
        """Delete up to 1000 keys in one request."""
        ...

    @abstractmethod
    async def copy_object(self, source_key: str, destination_key: str) -> None:
        ...

    @abstractmethod
    def iter_object(self, key: str) -> AsyncIterator[bytes]:
        """Stream an object's bytes in chunks."""
        ...
