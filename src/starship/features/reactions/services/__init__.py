from .custom_emoji_service import CustomEmojiService
from .reaction_service import ReactionService

__all__ = ["CustomEmojiService", "ReactionService"]
