from .protocols import EventTransport, Payload
from .topics import Topics

__all__ = ["EventTransport", "Payload", "Topics"]
