"""Event transport protocol."""

from abc import abstractmethod
from typing import Any, AsyncIterator, Dict, Protocol, runtime_checkable

Payload = Dict[str, Any]


@runtime_checkable
class EventTransport(Protocol):
    """Topic based fan-out, in process or through a broker.

    ``publish`` must never wait on a slow subscriber.
    """

    @abstractmethod
    async def publish(self, topic: str, payload: Payload) -> None:
        ...

    @abstractmethod
    def subscribe(self, topic: str) -> AsyncIterator[Payload]:
        """Stream every payload published to ``topic`` after the call."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
