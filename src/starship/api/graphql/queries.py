"""Query root."""

from typing import List, Optional

import strawberry
from strawberry.types import Info

from .types import (
    ChannelType,
    ChatType,
    CurrentUserType,
    CustomEmojiType,
    FileObjectType,
    FilesType,
    ForumPostType,
    ForumReplyType,
    ForumType,
    InviteType,
    MessageType,
    NotificationType,
    PageType,
    PlanetType,
    UserType,
    WikiPageType,
    WikiType,
)


@strawberry.type
class Query:
    @strawberry.field
    async def current_user(self, info: Info) -> CurrentUserType:
        user = await info.context.services.users.current_user(info.context.request_context)
        return CurrentUserType.from_user(user)

    @strawberry.field
    async def user(self, info: Info, id: strawberry.ID) -> UserType:
        user = await info.context.services.users.get_public(info.context.request_context, id)
        return UserType.from_entity(user)

    # Planets

    @strawberry.field
    async def planet(self, info: Info, id: strawberry.ID) -> PlanetType:
        planet = await info.context.services.planets.get(info.context.request_context, id)
        return PlanetType.from_entity(planet)

    @strawberry.field
    async def featured_planets(self, info: Info) -> List[PlanetType]:
        return [PlanetType.from_entity(p) for p in await info.context.services.planets.featured()]

    @strawberry.field
    async def admin_planets(self, info: Info, skip: int = 0, limit: int = 50) -> List[PlanetType]:
        planets = await info.context.services.planets.admin_list(info.context.request_context, skip, limit)
        return [PlanetType.from_entity(p) for p in planets]

    @strawberry.field
    async def invite(self, info: Info, id: strawberry.ID) -> InviteType:
        return InviteType.from_entity(await info.context.services.invites.get(id))

    @strawberry.field
    async def planet_invites(self, info: Info, planet_id: strawberry.ID) -> List[InviteType]:
        invites = await info.context.services.invites.list_for_planet(info.context.request_context, planet_id)
        return [InviteType.from_entity(invite) for invite in invites]

    # Components

    @strawberry.field
    async def page(self, info: Info, id: strawberry.ID) -> PageType:
        return PageType.from_entity(await info.context.services.pages.get(info.context.request_context, id))

    @strawberry.field
    async def wiki(self, info: Info, id: strawberry.ID) -> WikiType:
        return WikiType.from_entity(await info.context.services.wikis.get(info.context.request_context, id))

    @strawberry.field
    async def wiki_page(self, info: Info, id: strawberry.ID) -> WikiPageType:
        page = await info.context.services.wikis.get_page(info.context.request_context, id)
        return WikiPageType.from_entity(page)

    @strawberry.field
    async def forum(self, info: Info, id: strawberry.ID) -> ForumType:
        return ForumType.from_entity(await info.context.services.forums.get(info.context.request_context, id))

    @strawberry.field
    async def forum_post(self, info: Info, id: strawberry.ID) -> ForumPostType:
        post = await info.context.services.forum_posts.get(info.context.request_context, id)
        return ForumPostType.from_entity(post)

    @strawberry.field
    async def forum_reply(self, info: Info, id: strawberry.ID) -> ForumReplyType:
        reply = await info.context.services.forum_posts.get_reply(info.context.request_context, id)
        return ForumReplyType.from_entity(reply)

    @strawberry.field
    async def files(self, info: Info, id: strawberry.ID) -> FilesType:
        return FilesType.from_entity(await info.context.services.files.get(info.context.request_context, id))

    @strawberry.field
    async def file_object(self, info: Info, id: strawberry.ID) -> FileObjectType:
        obj = await info.context.services.file_objects.get(info.context.request_context, id)
        return FileObjectType.from_entity(obj)

    @strawberry.field
    async def file_object_array(self, info: Info, ids: List[strawberry.ID]) -> List[FileObjectType]:
        objects = await info.context.services.file_objects.object_array(info.context.request_context, ids)
        return [FileObjectType.from_entity(obj) for obj in objects]

    @strawberry.field
    async def search_files(
        self, info: Info, files_id: strawberry.ID, search_text: str, parent: str = "root"
    ) -> List[FileObjectType]:
        objects = await info.context.services.file_objects.search(
            info.context.request_context, files_id, parent, search_text
        )
        return [FileObjectType.from_entity(obj) for obj in objects]

    @strawberry.field
    async def download_url(self, info: Info, object_id: strawberry.ID) -> str:
        return await info.context.services.file_objects.download_url(info.context.request_context, object_id)

    @strawberry.field
    async def preview_url(self, info: Info, object_id: strawberry.ID) -> str:
        return await info.context.services.file_objects.preview_url(info.context.request_context, object_id)

    @strawberry.field
    async def chat(self, info: Info, id: strawberry.ID) -> ChatType:
        return ChatType.from_entity(await info.context.services.chats.get(info.context.request_context, id))

    @strawberry.field
    async def channel(self, info: Info, id: strawberry.ID) -> ChannelType:
        channel = await info.context.services.channels.get(info.context.request_context, id)
        return ChannelType.from_entity(channel)

    @strawberry.field
    async def direct_messages(self, info: Info) -> List[ChannelType]:
        channels = await info.context.services.channels.direct_messages(info.context.request_context)
        return [ChannelType.from_entity(channel) for channel in channels]

    @strawberry.field
    async def message(self, info: Info, id: strawberry.ID) -> MessageType:
        message = await info.context.services.messages.get(info.context.request_context, id)
        return MessageType.from_entity(message)

    # Notifications and emojis

    @strawberry.field
    async def notifications(self, info: Info, limit: int = 50) -> List[NotificationType]:
        notifications = await info.context.services.notifications.list(info.context.request_context, limit)
        return [NotificationType.from_entity(n) for n in notifications]

    @strawberry.field
    async def custom_emoji(self, info: Info, id: strawberry.ID) -> CustomEmojiType:
        emoji = await info.context.services.custom_emojis.get(info.context.request_context, id)
        return CustomEmojiType.from_entity(emoji)

    @strawberry.field
    async def planet_emojis(self, info: Info, planet_id: strawberry.ID) -> List[CustomEmojiType]:
        emojis = await info.context.services.custom_emojis.planet_emojis(info.context.request_context, planet_id)
        return [CustomEmojiType.from_entity(e) for e in emojis]

    @strawberry.field
    async def user_emojis(self, info: Info, user_id: Optional[strawberry.ID] = None) -> List[CustomEmojiType]:
        if user_id is None:
            user_id = info.context.request_context.require_user().id
        emojis = await info.context.services.custom_emojis.user_emojis(user_id)
        return [CustomEmojiType.from_entity(e) for e in emojis]
