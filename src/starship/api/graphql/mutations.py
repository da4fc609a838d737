"""Mutation root. Each field is a thin call into one service operation."""

from typing import List, Optional

import strawberry
from strawberry.tools import merge_types
from strawberry.types import Info

from .types import (
    AuthPayloadType,
    ChannelType,
    CurrentUserType,
    CustomEmojiType,
    DownloadTicketType,
    FileObjectType,
    ForumPostType,
    ForumReplyType,
    ForumType,
    InviteType,
    MessageType,
    PageType,
    PlanetType,
    UploadGrantType,
    UserType,
    WikiPageType,
)


@strawberry.type
class UserMutations:
    @strawberry.mutation
    async def register(self, info: Info, username: str, email: str, password: str) -> AuthPayloadType:
        user, token = await info.context.services.users.register(username, email, password)
        return AuthPayloadType(token=token, user=CurrentUserType.from_user(user))

    @strawberry.mutation
    async def login(self, info: Info, username: str, password: str) -> str:
        return await info.context.services.users.login(username, password)

    @strawberry.mutation
    async def update_profile(
        self,
        info: Info,
        bio: Optional[str] = None,
        profile_picture: Optional[str] = None,
        profile_banner: Optional[str] = None,
        mention_setting: Optional[int] = None,
    ) -> CurrentUserType:
        user = await info.context.services.users.update_profile(
            info.context.request_context, bio, profile_picture, profile_banner, mention_setting
        )
        return CurrentUserType.from_user(user)

    @strawberry.mutation
    async def block_user(self, info: Info, user_id: strawberry.ID) -> CurrentUserType:
        user = await info.context.services.users.block(info.context.request_context, user_id)
        return CurrentUserType.from_user(user)

    @strawberry.mutation
    async def unblock_user(self, info: Info, user_id: strawberry.ID) -> CurrentUserType:
        user = await info.context.services.users.unblock(info.context.request_context, user_id)
        return CurrentUserType.from_user(user)

    @strawberry.mutation
    async def toggle_global_ban(self, info: Info, user_id: strawberry.ID, banned: bool) -> UserType:
        """Admin only."""
        services = info.context.services
        me = info.context.request_context.require_user()
        await services.permissions.ensure_admin(me.id)
        user = await services.users.set_banned(user_id, banned)
        return UserType.from_entity(user.public())


@strawberry.type
class PlanetMutations:
    @strawberry.mutation
    async def insert_planet(self, info: Info, name: str) -> PlanetType:
        planet = await info.context.services.planets.create(info.context.request_context, name)
        return PlanetType.from_entity(planet)

    @strawberry.mutation
    async def follow_planet(self, info: Info, planet_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(await info.context.services.planets.follow(info.context.request_context, planet_id))

    @strawberry.mutation
    async def unfollow_planet(self, info: Info, planet_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.unfollow(info.context.request_context, planet_id)
        )

    @strawberry.mutation
    async def rename_planet(self, info: Info, planet_id: strawberry.ID, name: str) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.rename(info.context.request_context, planet_id, name)
        )

    @strawberry.mutation
    async def toggle_private(self, info: Info, planet_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.toggle_private(info.context.request_context, planet_id)
        )

    @strawberry.mutation
    async def set_planet_description(
        self, info: Info, planet_id: strawberry.ID, description: Optional[str] = None
    ) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.set_description(info.context.request_context, planet_id, description)
        )

    @strawberry.mutation
    async def add_component(self, info: Info, planet_id: strawberry.ID, type: str, name: str) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.add_component(info.context.request_context, planet_id, type, name)
        )

    @strawberry.mutation
    async def remove_component(self, info: Info, planet_id: strawberry.ID, component_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.remove_component(info.context.request_context, planet_id, component_id)
        )

    @strawberry.mutation
    async def rename_component(
        self, info: Info, planet_id: strawberry.ID, component_id: strawberry.ID, name: str
    ) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.rename_component(
                info.context.request_context, planet_id, component_id, name
            )
        )

    @strawberry.mutation
    async def ban_user(self, info: Info, planet_id: strawberry.ID, user_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.ban(info.context.request_context, planet_id, user_id)
        )

    @strawberry.mutation
    async def unban_user(self, info: Info, planet_id: strawberry.ID, user_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.unban(info.context.request_context, planet_id, user_id)
        )

    @strawberry.mutation
    async def remove_member(self, info: Info, planet_id: strawberry.ID, user_id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.remove_member(info.context.request_context, planet_id, user_id)
        )

    @strawberry.mutation
    async def apply_mod_tools(
        self,
        info: Info,
        planet_id: strawberry.ID,
        featured: Optional[bool] = None,
        verified: Optional[bool] = None,
        partnered: Optional[bool] = None,
        featured_description: Optional[str] = None,
    ) -> PlanetType:
        return PlanetType.from_entity(
            await info.context.services.planets.apply_admin_flags(
                info.context.request_context, planet_id, featured, verified, partnered, featured_description
            )
        )

    @strawberry.mutation
    async def insert_invite(self, info: Info, planet_id: strawberry.ID) -> InviteType:
        return InviteType.from_entity(await info.context.services.invites.create(info.context.request_context, planet_id))

    @strawberry.mutation
    async def use_invite(self, info: Info, id: strawberry.ID) -> PlanetType:
        return PlanetType.from_entity(await info.context.services.invites.use(info.context.request_context, id))

    @strawberry.mutation
    async def remove_invite(self, info: Info, id: strawberry.ID) -> bool:
        return await info.context.services.invites.remove(info.context.request_context, id)


@strawberry.type
class ContentMutations:
    @strawberry.mutation
    async def update_page(self, info: Info, page_id: strawberry.ID, content: str) -> PageType:
        return PageType.from_entity(await info.context.services.pages.update(info.context.request_context, page_id, content))

    @strawberry.mutation
    async def insert_wiki_page(self, info: Info, wiki_id: strawberry.ID, name: str, content: str) -> WikiPageType:
        page = await info.context.services.wikis.insert_page(info.context.request_context, wiki_id, name, content)
        return WikiPageType.from_entity(page)

    @strawberry.mutation
    async def update_wiki_page(self, info: Info, page_id: strawberry.ID, content: str) -> WikiPageType:
        page = await info.context.services.wikis.update_page(info.context.request_context, page_id, content)
        return WikiPageType.from_entity(page)

    @strawberry.mutation
    async def rename_wiki_page(self, info: Info, page_id: strawberry.ID, name: str) -> WikiPageType:
        page = await info.context.services.wikis.rename_page(info.context.request_context, page_id, name)
        return WikiPageType.from_entity(page)

    @strawberry.mutation
    async def remove_wiki_page(self, info: Info, page_id: strawberry.ID) -> bool:
        return await info.context.services.wikis.remove_page(info.context.request_context, page_id)

    @strawberry.mutation
    async def create_forum_tag(self, info: Info, forum_id: strawberry.ID, tag: str) -> ForumType:
        forum = await info.context.services.forums.create_tag(info.context.request_context, forum_id, tag)
        return ForumType.from_entity(forum)

    @strawberry.mutation
    async def remove_forum_tag(self, info: Info, forum_id: strawberry.ID, tag: str) -> ForumType:
        forum = await info.context.services.forums.remove_tag(info.context.request_context, forum_id, tag)
        return ForumType.from_entity(forum)

    @strawberry.mutation
    async def insert_forum_post(
        self, info: Info, forum_id: strawberry.ID, name: str, content: str, tag: Optional[str] = None
    ) -> ForumPostType:
        post = await info.context.services.forum_posts.insert(info.context.request_context, forum_id, name, content, tag)
        return ForumPostType.from_entity(post)

    @strawberry.mutation
    async def update_forum_post(self, info: Info, post_id: strawberry.ID, content: str) -> ForumPostType:
        post = await info.context.services.forum_posts.update(info.context.request_context, post_id, content)
        return ForumPostType.from_entity(post)

    @strawberry.mutation
    async def delete_forum_post(self, info: Info, post_id: strawberry.ID) -> bool:
        return await info.context.services.forum_posts.delete(info.context.request_context, post_id)

    @strawberry.mutation
    async def lock_forum_post(self, info: Info, post_id: strawberry.ID) -> ForumPostType:
        post = await info.context.services.forum_posts.toggle_lock(info.context.request_context, post_id)
        return ForumPostType.from_entity(post)

    @strawberry.mutation
    async def sticky_forum_post(self, info: Info, post_id: strawberry.ID) -> ForumPostType:
        post = await info.context.services.forum_posts.toggle_sticky(info.context.request_context, post_id)
        return ForumPostType.from_entity(post)

    @strawberry.mutation
    async def react_to_forum_post(self, info: Info, post_id: strawberry.ID, emoji: str) -> ForumPostType:
        post = await info.context.services.forum_posts.react(info.context.request_context, post_id, emoji)
        return ForumPostType.from_entity(post)

    @strawberry.mutation
    async def insert_forum_reply(self, info: Info, post_id: strawberry.ID, content: str) -> ForumReplyType:
        reply = await info.context.services.forum_posts.insert_reply(info.context.request_context, post_id, content)
        return ForumReplyType.from_entity(reply)

    @strawberry.mutation
    async def update_forum_reply(self, info: Info, reply_id: strawberry.ID, content: str) -> ForumReplyType:
        reply = await info.context.services.forum_posts.update_reply(info.context.request_context, reply_id, content)
        return ForumReplyType.from_entity(reply)

    @strawberry.mutation
    async def delete_forum_reply(self, info: Info, reply_id: strawberry.ID) -> bool:
        return await info.context.services.forum_posts.delete_reply(info.context.request_context, reply_id)

    @strawberry.mutation
    async def react_to_forum_reply(self, info: Info, reply_id: strawberry.ID, emoji: str) -> ForumReplyType:
        reply = await info.context.services.forum_posts.react_reply(info.context.request_context, reply_id, emoji)
        return ForumReplyType.from_entity(reply)

    @strawberry.mutation
    async def create_planet_emoji(self, info: Info, planet_id: strawberry.ID, name: str, url: str) -> CustomEmojiType:
        emoji = await info.context.services.custom_emojis.create_planet_emoji(
            info.context.request_context, planet_id, name, url
        )
        return CustomEmojiType.from_entity(emoji)

    @strawberry.mutation
    async def create_user_emoji(self, info: Info, name: str, url: str) -> CustomEmojiType:
        emoji = await info.context.services.custom_emojis.create_user_emoji(info.context.request_context, name, url)
        return CustomEmojiType.from_entity(emoji)

    @strawberry.mutation
    async def delete_custom_emoji(self, info: Info, emoji_id: strawberry.ID) -> bool:
        return await info.context.services.custom_emojis.delete(info.context.request_context, emoji_id)


@strawberry.type
class FileMutations:
    @strawberry.mutation
    async def create_folder(
        self, info: Info, files_id: strawberry.ID, name: str, parent: str = "root"
    ) -> FileObjectType:
        folder = await info.context.services.file_objects.create_folder(
            info.context.request_context, files_id, parent, name
        )
        return FileObjectType.from_entity(folder)

    @strawberry.mutation
    async def rename_file_object(self, info: Info, object_id: strawberry.ID, name: str) -> FileObjectType:
        obj = await info.context.services.file_objects.rename(info.context.request_context, object_id, name)
        return FileObjectType.from_entity(obj)

    @strawberry.mutation
    async def move_file_objects(
        self, info: Info, object_ids: List[strawberry.ID], parent: str
    ) -> List[FileObjectType]:
        objects = await info.context.services.file_objects.move(info.context.request_context, object_ids, parent)
        return [FileObjectType.from_entity(obj) for obj in objects]

    @strawberry.mutation
    async def upload_file(
        self,
        info: Info,
        folder_id: str,
        name: str,
        content_type: str,
        files_id: Optional[strawberry.ID] = None,
    ) -> UploadGrantType:
        grant = await info.context.services.file_objects.upload(
            info.context.request_context, folder_id, name, content_type, files_id
        )
        return UploadGrantType.from_grant(grant)

    @strawberry.mutation
    async def complete_upload(self, info: Info, object_id: strawberry.ID) -> FileObjectType:
        obj = await info.context.services.file_objects.complete_upload(info.context.request_context, object_id)
        return FileObjectType.from_entity(obj)

    @strawberry.mutation
    async def cancel_upload(self, info: Info, object_id: strawberry.ID) -> bool:
        return await info.context.services.file_objects.cancel_upload(info.context.request_context, object_id)

    @strawberry.mutation
    async def copy_file(
        self, info: Info, object_id: strawberry.ID, folder_id: str, files_id: Optional[strawberry.ID] = None
    ) -> FileObjectType:
        obj = await info.context.services.file_objects.copy(info.context.request_context, object_id, folder_id, files_id)
        return FileObjectType.from_entity(obj)

    @strawberry.mutation
    async def delete_file_object(self, info: Info, object_id: strawberry.ID) -> bool:
        return await info.context.services.file_objects.delete(info.context.request_context, object_id)

    @strawberry.mutation
    async def create_download_ticket(
        self, info: Info, object_ids: List[strawberry.ID], name: Optional[str] = None
    ) -> DownloadTicketType:
        ticket = await info.context.services.file_objects.create_download_ticket(
            info.context.request_context, object_ids, name
        )
        return DownloadTicketType.from_entity(ticket)


@strawberry.type
class ChatMutations:
    @strawberry.mutation
    async def create_channel(self, info: Info, chat_id: strawberry.ID, name: str) -> ChannelType:
        channel = await info.context.services.channels.create(info.context.request_context, chat_id, name)
        return ChannelType.from_entity(channel)

    @strawberry.mutation
    async def rename_channel(self, info: Info, channel_id: strawberry.ID, name: str) -> ChannelType:
        channel = await info.context.services.channels.rename(info.context.request_context, channel_id, name)
        return ChannelType.from_entity(channel)

    @strawberry.mutation
    async def set_channel_topic(self, info: Info, channel_id: strawberry.ID, topic: str) -> ChannelType:
        channel = await info.context.services.channels.set_topic(info.context.request_context, channel_id, topic)
        return ChannelType.from_entity(channel)

    @strawberry.mutation
    async def delete_channel(self, info: Info, channel_id: strawberry.ID) -> bool:
        return await info.context.services.channels.delete(info.context.request_context, channel_id)

    @strawberry.mutation
    async def create_direct_message(
        self, info: Info, user_ids: List[strawberry.ID], name: Optional[str] = None
    ) -> ChannelType:
        channel = await info.context.services.channels.create_direct_message(
            info.context.request_context, user_ids, name
        )
        return ChannelType.from_entity(channel)

    @strawberry.mutation
    async def send_message(
        self,
        info: Info,
        channel_id: strawberry.ID,
        content: str,
        attachments: Optional[List[strawberry.ID]] = None,
        reply_to: Optional[strawberry.ID] = None,
    ) -> MessageType:
        message = await info.context.services.messages.send(
            info.context.request_context, channel_id, content, attachments, reply_to
        )
        return MessageType.from_entity(message)

    @strawberry.mutation
    async def edit_message(self, info: Info, message_id: strawberry.ID, content: str) -> MessageType:
        message = await info.context.services.messages.edit(info.context.request_context, message_id, content)
        return MessageType.from_entity(message)

    @strawberry.mutation
    async def delete_message(self, info: Info, message_id: strawberry.ID) -> bool:
        return await info.context.services.messages.delete(info.context.request_context, message_id)

    @strawberry.mutation
    async def pin_message(self, info: Info, message_id: strawberry.ID) -> MessageType:
        message = await info.context.services.messages.set_pinned(info.context.request_context, message_id, True)
        return MessageType.from_entity(message)

    @strawberry.mutation
    async def unpin_message(self, info: Info, message_id: strawberry.ID) -> MessageType:
        message = await info.context.services.messages.set_pinned(info.context.request_context, message_id, False)
        return MessageType.from_entity(message)

    @strawberry.mutation
    async def react_to_message(self, info: Info, message_id: strawberry.ID, emoji: str) -> MessageType:
        message = await info.context.services.messages.react(info.context.request_context, message_id, emoji)
        return MessageType.from_entity(message)

    @strawberry.mutation
    async def clear_notification(self, info: Info, notification_id: strawberry.ID) -> bool:
        return await info.context.services.notifications.clear(info.context.request_context, notification_id)

    @strawberry.mutation
    async def clear_all_notifications(self, info: Info) -> int:
        return await info.context.services.notifications.clear_all(info.context.request_context)

    @strawberry.mutation
    async def mark_all_notifications_read(self, info: Info) -> int:
        return await info.context.services.notifications.mark_all_read(info.context.request_context)


Mutation = merge_types(
    "Mutation", (UserMutations, PlanetMutations, ContentMutations, FileMutations, ChatMutations)
)
