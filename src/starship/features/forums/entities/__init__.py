from .forum import Forum, ForumPost, ForumReply

__all__ = ["Forum", "ForumPost", "ForumReply"]
