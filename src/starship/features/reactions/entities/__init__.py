from .reaction import CustomEmoji

__all__ = ["CustomEmoji"]
