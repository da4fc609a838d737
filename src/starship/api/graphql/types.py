"""GraphQL object types.

Relational fields resolve through the request's loaders, never through
direct store lookups. List fields that page or filter (wiki pages, forum
posts and replies, folder listings, channel feeds) call their services
instead, since those are queries rather than lookups by id.
"""

from datetime import datetime
from typing import List, Optional

import strawberry
from strawberry.types import Info

from ...features.chats.entities import Attachment, Channel, Message
from ...features.chats.services import MessageFeed
from ...features.files.entities import DownloadTicket, FileObject
from ...features.files.services import UploadGrant
from ...features.forums.entities import Forum, ForumPost, ForumReply
from ...features.forums.services import ForumPostFeed
from ...features.notifications.entities import Notification
from ...features.pages.entities import Page
from ...features.planets.entities import Invite, Planet
from ...features.reactions.entities import CustomEmoji
from ...features.users.entities import PublicUser, User
from ...features.wikis.entities import Wiki, WikiPage


async def _user(info: Info, user_id: Optional[str]) -> Optional["UserType"]:
    if not user_id:
        return None
    user = await info.context.loaders.users.load(user_id)
    return UserType.from_entity(user) if user else None


async def _users(info: Info, user_ids: List[str]) -> List["UserType"]:
    users = await info.context.loaders.users.load_many(user_ids)
    return [UserType.from_entity(user) for user in users if user]


async def _planet(info: Info, planet_id: Optional[str]) -> Optional["PlanetType"]:
    if not planet_id:
        return None
    planet = await info.context.loaders.planets.load(planet_id)
    return PlanetType.from_entity(planet) if planet else None


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    username: str
    created_at: datetime
    profile_picture: Optional[str]
    profile_banner: Optional[str]
    profile_bio: Optional[str]
    admin: bool
    banned: bool
    online: bool

    @classmethod
    def from_entity(cls, user: PublicUser) -> "UserType":
        return cls(
            id=user.id,
            username=user.username,
            created_at=user.created_at,
            profile_picture=user.profile_picture,
            profile_banner=user.profile_banner,
            profile_bio=user.profile_bio,
            admin=user.admin,
            banned=user.banned,
            online=user.online,
        )


@strawberry.type(name="CurrentUser")
class CurrentUserType(UserType):
    """The caller's own account, including private relations."""

    email: Optional[str]
    mention_setting: int
    used_bytes: float
    cap_waived: bool
    following_ids: strawberry.Private[List[str]]
    blocked_ids: strawberry.Private[List[str]]

    @classmethod
    def from_user(cls, user: User) -> "CurrentUserType":
        public = user.public()
        return cls(
            id=public.id,
            username=public.username,
            created_at=public.created_at,
            profile_picture=public.profile_picture,
            profile_banner=public.profile_banner,
            profile_bio=public.profile_bio,
            admin=public.admin,
            banned=public.banned,
            online=public.online,
            email=user.email,
            mention_setting=int(user.mention_setting),
            used_bytes=user.used_bytes,
            cap_waived=user.cap_waived,
            following_ids=list(user.following),
            blocked_ids=list(user.blocked),
        )

    @strawberry.field
    async def following(self, info: Info) -> List["PlanetType"]:
        planets = await info.context.loaders.planets.load_many(self.following_ids)
        return [PlanetType.from_entity(p) for p in planets if p]

    @strawberry.field
    async def blocked_users(self, info: Info) -> List[UserType]:
        return await _users(info, self.blocked_ids)


@strawberry.type(name="AuthPayload")
class AuthPayloadType:
    token: str
    user: CurrentUserType


@strawberry.type(name="PlanetComponent")
class PlanetComponentType:
    component_id: strawberry.ID
    type: str
    name: str


@strawberry.type(name="Planet")
class PlanetType:
    id: strawberry.ID
    name: str
    private: bool
    description: Optional[str]
    follower_count: int
    featured: bool
    featured_description: Optional[str]
    verified: bool
    partnered: bool
    created_at: datetime
    components: List[PlanetComponentType]
    owner_id: strawberry.Private[str]
    member_ids: strawberry.Private[List[str]]
    banned_ids: strawberry.Private[List[str]]

    @classmethod
    def from_entity(cls, planet: Planet) -> "PlanetType":
        return cls(
            id=planet.id,
            name=planet.name,
            private=planet.private,
            description=planet.description,
            follower_count=planet.follower_count,
            featured=planet.featured,
            featured_description=planet.featured_description,
            verified=planet.verified,
            partnered=planet.partnered,
            created_at=planet.created_at,
            components=[
                PlanetComponentType(component_id=c["component_id"], type=c["type"], name=c["name"])
                for c in planet.components
            ],
            owner_id=planet.owner,
            member_ids=list(planet.members),
            banned_ids=list(planet.banned),
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def members(self, info: Info) -> List[UserType]:
        return await _users(info, self.member_ids)

    @strawberry.field
    async def banned(self, info: Info) -> List[UserType]:
        return await _users(info, self.banned_ids)


@strawberry.type(name="Invite")
class InviteType:
    id: strawberry.ID
    created_at: datetime
    planet_id: strawberry.Private[str]
    owner_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, invite: Invite) -> "InviteType":
        return cls(id=invite.id, created_at=invite.created_at, planet_id=invite.planet, owner_id=invite.owner)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)


@strawberry.type(name="Reaction")
class ReactionType:
    emoji: str
    reactor_ids: strawberry.Private[List[str]]

    @strawberry.field
    async def reactors(self, info: Info) -> List[UserType]:
        return await _users(info, self.reactor_ids)

    @strawberry.field
    def count(self) -> int:
        return len(self.reactor_ids)


def _reactions(entries) -> List[ReactionType]:
    return [ReactionType(emoji=entry["emoji"], reactor_ids=list(entry["reactors"])) for entry in entries]


@strawberry.type(name="CustomEmoji")
class CustomEmojiType:
    id: strawberry.ID
    name: str
    url: str
    created_at: datetime
    planet_id: strawberry.Private[Optional[str]]
    owner_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, emoji: CustomEmoji) -> "CustomEmojiType":
        return cls(
            id=emoji.id, name=emoji.name, url=emoji.url, created_at=emoji.created_at,
            planet_id=emoji.planet, owner_id=emoji.owner,
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)


@strawberry.type(name="Notification")
class NotificationType:
    id: strawberry.ID
    text: str
    icon: str
    to_url: Optional[str]
    is_read: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationType":
        return cls(
            id=notification.id,
            text=notification.text,
            icon=notification.icon,
            to_url=notification.to_url,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


# Components

@strawberry.type(name="Page")
class PageType:
    id: strawberry.ID
    content: str
    created_at: datetime
    updated_at: datetime
    planet_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, page: Page) -> "PageType":
        return cls(id=page.id, content=page.content, created_at=page.created_at,
                   updated_at=page.updated_at, planet_id=page.planet)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)


@strawberry.type(name="WikiPage")
class WikiPageType:
    id: strawberry.ID
    name: str
    content: str
    created_at: datetime
    updated_at: datetime
    owner_id: strawberry.Private[str]
    wiki_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, page: WikiPage) -> "WikiPageType":
        return cls(id=page.id, name=page.name, content=page.content, created_at=page.created_at,
                   updated_at=page.updated_at, owner_id=page.owner, wiki_id=page.wiki_id)

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def wiki(self, info: Info) -> Optional["WikiType"]:
        wiki = await info.context.loaders.wikis.load(self.wiki_id)
        return WikiType.from_entity(wiki) if wiki else None


@strawberry.type(name="Wiki")
class WikiType:
    id: strawberry.ID
    created_at: datetime
    planet_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, wiki: Wiki) -> "WikiType":
        return cls(id=wiki.id, created_at=wiki.created_at, planet_id=wiki.planet)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def pages(self, info: Info) -> List[WikiPageType]:
        pages = await info.context.services.wikis.pages(info.context.request_context, self.id)
        return [WikiPageType.from_entity(page) for page in pages]


@strawberry.type(name="ForumReply")
class ForumReplyType:
    id: strawberry.ID
    content: str
    created_at: datetime
    updated_at: Optional[datetime]
    reactions: List[ReactionType]
    owner_id: strawberry.Private[str]
    post_id: strawberry.Private[str]
    mention_ids: strawberry.Private[List[str]]

    @classmethod
    def from_entity(cls, reply: ForumReply) -> "ForumReplyType":
        return cls(
            id=reply.id, content=reply.content, created_at=reply.created_at, updated_at=reply.updated_at,
            reactions=_reactions(reply.reactions), owner_id=reply.owner, post_id=reply.post_id,
            mention_ids=list(reply.mentions),
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def post(self, info: Info) -> Optional["ForumPostType"]:
        post = await info.context.loaders.forum_posts.load(self.post_id)
        return ForumPostType.from_entity(post) if post else None

    @strawberry.field
    async def mentions(self, info: Info) -> List[UserType]:
        return await _users(info, self.mention_ids)


@strawberry.type(name="ForumPost")
class ForumPostType:
    id: strawberry.ID
    name: str
    content: str
    tags: List[str]
    reply_count: int
    stickied: bool
    locked: bool
    created_at: datetime
    updated_at: datetime
    reactions: List[ReactionType]
    owner_id: strawberry.Private[str]
    forum_id: strawberry.Private[str]
    planet_id: strawberry.Private[str]
    mention_ids: strawberry.Private[List[str]]

    @classmethod
    def from_entity(cls, post: ForumPost) -> "ForumPostType":
        return cls(
            id=post.id, name=post.name, content=post.content, tags=list(post.tags),
            reply_count=post.reply_count, stickied=post.stickied, locked=post.locked,
            created_at=post.created_at, updated_at=post.updated_at, reactions=_reactions(post.reactions),
            owner_id=post.owner, forum_id=post.component_id, planet_id=post.planet,
            mention_ids=list(post.mentions),
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def forum(self, info: Info) -> Optional["ForumType"]:
        forum = await info.context.loaders.forums.load(self.forum_id)
        return ForumType.from_entity(forum) if forum else None

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def mentions(self, info: Info) -> List[UserType]:
        return await _users(info, self.mention_ids)

    @strawberry.field
    async def replies(self, info: Info, skip: int = 0, limit: int = 25) -> List[ForumReplyType]:
        replies = await info.context.services.forum_posts.replies_for(
            info.context.request_context, self.id, skip, limit
        )
        return [ForumReplyType.from_entity(reply) for reply in replies]


@strawberry.type(name="ForumPostFeed")
class ForumPostFeedType:
    posts: List[ForumPostType]
    cursor: str

    @classmethod
    def from_feed(cls, feed: ForumPostFeed) -> "ForumPostFeedType":
        return cls(posts=[ForumPostType.from_entity(p) for p in feed.posts], cursor=feed.cursor)


@strawberry.type(name="Forum")
class ForumType:
    id: strawberry.ID
    tags: List[str]
    created_at: datetime
    planet_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, forum: Forum) -> "ForumType":
        return cls(id=forum.id, tags=list(forum.tags), created_at=forum.created_at, planet_id=forum.planet)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def posts(
        self,
        info: Info,
        sort_method: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: int = 25,
        tag: Optional[str] = None,
    ) -> ForumPostFeedType:
        feed = await info.context.services.forums.post_feed(
            info.context.request_context, self.id, sort_method, cursor, limit, tag
        )
        return ForumPostFeedType.from_feed(feed)

    @strawberry.field
    async def stickied_posts(self, info: Info) -> List[ForumPostType]:
        posts = await info.context.services.forums.stickied_posts(info.context.request_context, self.id)
        return [ForumPostType.from_entity(post) for post in posts]


@strawberry.type(name="FileObject")
class FileObjectType:
    id: strawberry.ID
    name: str
    type: str
    file_type: Optional[str]
    path: List[str]
    parent: str
    size: float
    finished_uploading: bool
    created_at: datetime
    owner_id: strawberry.Private[str]
    files_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, obj: FileObject) -> "FileObjectType":
        return cls(
            id=obj.id, name=obj.name, type=obj.type, file_type=obj.file_type, path=list(obj.path),
            parent=obj.parent, size=obj.size, finished_uploading=obj.finished_uploading,
            created_at=obj.created_at, owner_id=obj.owner, files_id=obj.component_id,
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def path_objects(self, info: Info) -> List["FileObjectType"]:
        """Ancestor folders below the root, outermost first."""
        folders = await info.context.loaders.file_objects.load_many([p for p in self.path if p != "root"])
        return [FileObjectType.from_entity(folder) for folder in folders if folder]

    @strawberry.field
    async def files(self, info: Info) -> Optional["FilesType"]:
        files = await info.context.loaders.files.load(self.files_id)
        return FilesType.from_entity(files) if files else None


@strawberry.type(name="UploadGrant")
class UploadGrantType:
    object: FileObjectType
    upload_url: str

    @classmethod
    def from_grant(cls, grant: UploadGrant) -> "UploadGrantType":
        return cls(object=FileObjectType.from_entity(grant.object), upload_url=grant.upload_url)


@strawberry.type(name="DownloadTicket")
class DownloadTicketType:
    id: strawberry.ID
    name: Optional[str]
    created_at: datetime

    @classmethod
    def from_entity(cls, ticket: DownloadTicket) -> "DownloadTicketType":
        return cls(id=ticket.id, name=ticket.name, created_at=ticket.created_at)


@strawberry.type(name="Files")
class FilesType:
    id: strawberry.ID
    created_at: datetime
    planet_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, files) -> "FilesType":
        return cls(id=files.id, created_at=files.created_at, planet_id=files.planet)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def files(self, info: Info, parent: str = "root") -> List[FileObjectType]:
        objects = await info.context.services.file_objects.list_files(info.context.request_context, self.id, parent)
        return [FileObjectType.from_entity(obj) for obj in objects]

    @strawberry.field
    async def folders(self, info: Info, parent: str = "root") -> List[FileObjectType]:
        objects = await info.context.services.file_objects.list_folders(info.context.request_context, self.id, parent)
        return [FileObjectType.from_entity(obj) for obj in objects]


@strawberry.type(name="Attachment")
class AttachmentType:
    id: strawberry.ID
    name: str
    type: str
    url: str

    @classmethod
    def from_entity(cls, attachment: Attachment) -> "AttachmentType":
        return cls(id=attachment.id, name=attachment.name, type=attachment.type, url=attachment.url)


@strawberry.type(name="Message")
class MessageType:
    id: strawberry.ID
    content: str
    pinned: bool
    edited: bool
    created_at: datetime
    updated_at: datetime
    reactions: List[ReactionType]
    owner_id: strawberry.Private[str]
    channel_id: strawberry.Private[str]
    reply_to_id: strawberry.Private[Optional[str]]
    attachment_ids: strawberry.Private[List[str]]
    mention_ids: strawberry.Private[List[str]]

    @classmethod
    def from_entity(cls, message: Message) -> "MessageType":
        return cls(
            id=message.id, content=message.content, pinned=message.pinned, edited=message.edited,
            created_at=message.created_at, updated_at=message.updated_at,
            reactions=_reactions(message.reactions), owner_id=message.owner, channel_id=message.channel,
            reply_to_id=message.reply_to, attachment_ids=list(message.attachments),
            mention_ids=list(message.mentions),
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def channel(self, info: Info) -> Optional["ChannelType"]:
        channel = await info.context.loaders.channels.load(self.channel_id)
        return ChannelType.from_entity(channel) if channel else None

    @strawberry.field
    async def parent(self, info: Info) -> Optional["MessageType"]:
        if not self.reply_to_id:
            return None
        message = await info.context.loaders.messages.load(self.reply_to_id)
        return MessageType.from_entity(message) if message else None

    @strawberry.field
    async def attachments(self, info: Info) -> List[AttachmentType]:
        attachments = await info.context.loaders.attachments.load_many(self.attachment_ids)
        return [AttachmentType.from_entity(a) for a in attachments if a]

    @strawberry.field
    async def mentions(self, info: Info) -> List[UserType]:
        return await _users(info, self.mention_ids)


@strawberry.type(name="MessageFeed")
class MessageFeedType:
    messages: List[MessageType]
    cursor: Optional[str]

    @classmethod
    def from_feed(cls, feed: MessageFeed) -> "MessageFeedType":
        return cls(messages=[MessageType.from_entity(m) for m in feed.messages], cursor=feed.cursor)


@strawberry.type(name="Channel")
class ChannelType:
    id: strawberry.ID
    name: str
    type: int
    topic: Optional[str]
    created_at: datetime
    owner_id: strawberry.Private[str]
    planet_id: strawberry.Private[Optional[str]]
    user_ids: strawberry.Private[List[str]]

    @classmethod
    def from_entity(cls, channel: Channel) -> "ChannelType":
        return cls(
            id=channel.id, name=channel.name, type=int(channel.type), topic=channel.topic,
            created_at=channel.created_at, owner_id=channel.owner, planet_id=channel.planet,
            user_ids=list(channel.users),
        )

    @strawberry.field
    async def owner(self, info: Info) -> Optional[UserType]:
        return await _user(info, self.owner_id)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def users(self, info: Info) -> List[UserType]:
        return await _users(info, self.user_ids)

    @strawberry.field
    async def messages(self, info: Info, limit: int = 50, cursor: Optional[str] = None) -> MessageFeedType:
        feed = await info.context.services.channels.message_feed(info.context.request_context, self.id, limit, cursor)
        return MessageFeedType.from_feed(feed)

    @strawberry.field
    async def pinned_messages(self, info: Info, limit: int = 25, cursor: Optional[str] = None) -> MessageFeedType:
        feed = await info.context.services.channels.pinned_feed(info.context.request_context, self.id, limit, cursor)
        return MessageFeedType.from_feed(feed)


@strawberry.type(name="Chat")
class ChatType:
    id: strawberry.ID
    created_at: datetime
    planet_id: strawberry.Private[str]

    @classmethod
    def from_entity(cls, chat) -> "ChatType":
        return cls(id=chat.id, created_at=chat.created_at, planet_id=chat.planet)

    @strawberry.field
    async def planet(self, info: Info) -> Optional[PlanetType]:
        return await _planet(info, self.planet_id)

    @strawberry.field
    async def channels(self, info: Info) -> List[ChannelType]:
        channels = await info.context.services.chats.channels_of(info.context.request_context, self.id)
        return [ChannelType.from_entity(channel) for channel in channels]
