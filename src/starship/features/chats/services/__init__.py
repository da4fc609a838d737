from .channel_service import ChannelAccess, ChannelService, MessageFeed
from .chat_service import ChatService
from .message_service import MessageService

__all__ = ["ChannelAccess", "ChannelService", "ChatService", "MessageFeed", "MessageService"]
