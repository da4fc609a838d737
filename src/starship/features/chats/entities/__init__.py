from .chat import Attachment, Channel, Chat, Message

__all__ = ["Attachment", "Channel", "Chat", "Message"]
