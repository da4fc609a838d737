from .mention_service import MentionService
from .notification_service import NotificationService

__all__ = ["MentionService", "NotificationService"]
