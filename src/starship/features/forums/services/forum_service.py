"""Forum component: feeds and tags."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ....config.constants import DEFAULT_FORUM_SORT, FORUM_SORTS, MAX_FORUM_PAGE, ForumSortType
from ....core.context import RequestContext
from ....core.exceptions import ValidationError
from ...components.services.access import ComponentAccess
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id
from ..entities.forum import Forum, ForumPost, ForumReply

logger = logging.getLogger(__name__)


@dataclass
class ForumPostFeed:
    posts: List[ForumPost]
    cursor: str


def _parse_cursor(field: str, cursor: str):
    try:
        if field == "reply_count":
            return int(cursor)
        return datetime.fromisoformat(cursor)
    except ValueError as e:
        raise ValidationError("Invalid cursor.") from e


def _format_cursor(field: str, post: ForumPost) -> str:
    value = getattr(post, field)
    return str(value) if field == "reply_count" else value.isoformat()


class ForumService(ComponentAccess):
    def __init__(self, store: EntityStore, permissions):
        super().__init__(permissions)
        self.forums = DocumentRepository(store.collection(Collections.FORUMS), Forum)
        self.posts = DocumentRepository(store.collection(Collections.FORUM_POSTS), ForumPost)
        self.replies = DocumentRepository(store.collection(Collections.FORUM_REPLIES), ForumReply)

    async def create_component(self, planet_id: str, owner_id: str) -> Forum:
        return await self.forums.insert(Forum(id=generate_id(), owner=owner_id, planet=planet_id))

    async def delete_component(self, component_id: str) -> None:
        await self.forums.delete({"id": component_id})
        await self.posts.delete_many({"component_id": component_id})
        await self.replies.delete_many({"component_id": component_id})

    async def get(self, context: RequestContext, forum_id: str) -> Forum:
        return await self.loaded_readable(context, context.loaders.forums, forum_id)

    async def post_feed(
        self,
        context: RequestContext,
        forum_id: str,
        sort_method: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: int = MAX_FORUM_PAGE,
        tag: Optional[str] = None,
    ) -> ForumPostFeed:
        """One page of non-stickied posts, continuing after ``cursor``."""
        await self.readable(context, self.forums, forum_id)
        try:
            sort_type = ForumSortType(sort_method) if sort_method else DEFAULT_FORUM_SORT
        except ValueError as e:
            raise ValidationError(f"Invalid sort method '{sort_method}'") from e
        sort = FORUM_SORTS[sort_type]
        field, direction = sort[0]
        limit = max(1, min(limit, MAX_FORUM_PAGE))

        flt = {"component_id": forum_id, "stickied": False}
        if tag:
            flt["tags"] = tag
        if cursor:
            flt[field] = {"$lt" if direction < 0 else "$gt": _parse_cursor(field, cursor)}

        posts = await self.posts.find(flt, sort=sort, limit=limit)
        if not posts:
            return ForumPostFeed(posts=[], cursor=cursor or "")
        return ForumPostFeed(posts=posts, cursor=_format_cursor(field, posts[-1]))

    async def stickied_posts(self, context: RequestContext, forum_id: str) -> List[ForumPost]:
        await self.readable(context, self.forums, forum_id)
        return await self.posts.find({"component_id": forum_id, "stickied": True}, sort=[("created_at", -1)])

    async def create_tag(self, context: RequestContext, forum_id: str, tag: str) -> Forum:
        forum = await self.full_writable(context, self.forums, forum_id)
        if tag in forum.tags:
            raise ValidationError("Tag already exists!")
        updated = await self.forums.update({"id": forum_id, "tags": {"$ne": tag}}, {"$push": {"tags": tag}})
        if updated is None:
            raise ValidationError("Tag already exists!")
        return updated

    async def remove_tag(self, context: RequestContext, forum_id: str, tag: str) -> Forum:
        await self.full_writable(context, self.forums, forum_id)
        return await self.forums.update_by_id(forum_id, {"$pull": {"tags": tag}})
