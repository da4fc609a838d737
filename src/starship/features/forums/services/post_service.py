"""Forum posts and replies."""

import logging
from typing import List, Optional

from ....core.context import RequestContext
from ....core.exceptions import ForbiddenError, ValidationError
from ...components.services.access import ComponentAccess
from ...notifications.services.mention_service import MentionService
from ...reactions.services.reaction_service import ReactionService
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id, set_fields, utc_now
from ..entities.forum import Forum, ForumPost, ForumReply

logger = logging.getLogger(__name__)


class ForumPostService(ComponentAccess):
    def __init__(
        self,
        store: EntityStore,
        permissions,
        reactions: ReactionService,
        mentions: MentionService,
        site_url: str = "",
    ):
        super().__init__(permissions)
        self.forums = DocumentRepository(store.collection(Collections.FORUMS), Forum)
        self.posts = DocumentRepository(store.collection(Collections.FORUM_POSTS), ForumPost)
        self.replies = DocumentRepository(store.collection(Collections.FORUM_REPLIES), ForumReply)
        self.reactions = reactions
        self.mentions = mentions
        self.site_url = site_url.rstrip("/")

    def _post_url(self, post: ForumPost) -> str:
        return f"{self.site_url}/planet/{post.planet}/{post.component_id}/{post.id}"

    async def _notify_mentions(self, context: RequestContext, post: ForumPost, text: str) -> List[str]:
        planet = await self.permissions.planet_repository.get(post.planet)
        url = self._post_url(post)
        return await self.mentions.process(
            text,
            context.user.id,
            context.user.username,
            f"the forum thread [{post.name}]({url})",
            planet,
            url,
        )

    # Posts

    async def get(self, context: RequestContext, post_id: str) -> ForumPost:
        return await self.readable(context, self.posts, post_id)

    async def insert(self, context: RequestContext, forum_id: str, name: str, content: str, tag: Optional[str] = None) -> ForumPost:
        forum = await self.public_writable(context, self.forums, forum_id)
        if not name.strip():
            raise ValidationError("Posts need a title.")
        post = ForumPost(
            id=generate_id(),
            component_id=forum.id,
            planet=forum.planet,
            owner=context.user.id,
            name=name,
            content=content,
            tags=[tag] if tag and tag in forum.tags else [],
        )
        post = await self.posts.insert(post)
        mentioned = await self._notify_mentions(context, post, content)
        if mentioned:
            post = await self.posts.update_by_id(post.id, {"$set": {"mentions": mentioned}})
        return post

    async def update(self, context: RequestContext, post_id: str, content: str) -> ForumPost:
        await self.owner_or_full_writable(context, self.posts, post_id)
        return await self.posts.update_by_id(post_id, set_fields(content=content))

    async def delete(self, context: RequestContext, post_id: str) -> bool:
        await self.owner_or_full_writable(context, self.posts, post_id)
        await self.posts.delete({"id": post_id})
        await self.replies.delete_many({"post_id": post_id})
        return True

    async def toggle_lock(self, context: RequestContext, post_id: str) -> ForumPost:
        post = await self.full_writable(context, self.posts, post_id)
        return await self.posts.update_by_id(post_id, {"$set": {"locked": not post.locked}})

    async def toggle_sticky(self, context: RequestContext, post_id: str) -> ForumPost:
        post = await self.full_writable(context, self.posts, post_id)
        return await self.posts.update_by_id(post_id, {"$set": {"stickied": not post.stickied}})

    async def react(self, context: RequestContext, post_id: str, emoji: str) -> ForumPost:
        await self.public_writable(context, self.posts, post_id)
        document = await self.reactions.toggle(self.posts.collection, post_id, emoji, context.user.id)
        return ForumPost.from_document(document)

    # Replies

    async def get_reply(self, context: RequestContext, reply_id: str) -> ForumReply:
        return await self.readable(context, self.replies, reply_id)

    async def replies_for(self, context: RequestContext, post_id: str, skip: int = 0, limit: int = 25) -> List[ForumReply]:
        await self.readable(context, self.posts, post_id)
        return await self.replies.find({"post_id": post_id}, sort=[("created_at", 1)], skip=skip, limit=limit)

    async def insert_reply(self, context: RequestContext, post_id: str, content: str) -> ForumReply:
        post = await self.public_writable(context, self.posts, post_id)
        if post.locked:
            raise ForbiddenError("This post is locked.")
        reply = await self.replies.insert(
            ForumReply(
                id=generate_id(),
                post_id=post.id,
                component_id=post.component_id,
                planet=post.planet,
                owner=context.user.id,
                content=content,
            )
        )
        await self.posts.update_by_id(post.id, {"$inc": {"reply_count": 1}, "$set": {"updated_at": utc_now()}})
        mentioned = await self._notify_mentions(context, post, content)
        if mentioned:
            reply = await self.replies.update_by_id(reply.id, {"$set": {"mentions": mentioned}})
        return reply

    async def update_reply(self, context: RequestContext, reply_id: str, content: str) -> ForumReply:
        await self.owner_or_full_writable(context, self.replies, reply_id)
        return await self.replies.update_by_id(reply_id, set_fields(content=content))

    async def delete_reply(self, context: RequestContext, reply_id: str) -> bool:
        reply = await self.owner_or_full_writable(context, self.replies, reply_id)
        if await self.replies.delete({"id": reply_id}):
            await self.posts.update_by_id(reply.post_id, {"$inc": {"reply_count": -1}})
        return True

    async def react_reply(self, context: RequestContext, reply_id: str, emoji: str) -> ForumReply:
        await self.public_writable(context, self.replies, reply_id)
        document = await self.reactions.toggle(self.replies.collection, reply_id, emoji, context.user.id)
        return ForumReply.from_document(document)
