from .forum_service import ForumPostFeed, ForumService
from .post_service import ForumPostService

__all__ = ["ForumPostFeed", "ForumPostService", "ForumService"]
