"""Service wiring.

``build_services`` assembles every service over one entity store, one
event transport and one object storage. The FastAPI app builds it in its
lifespan; tests build it over in-memory adapters.
"""

from dataclasses import dataclass

from ..config.settings import StarshipSettings
from ..features.chats.services import ChannelService, ChatService, MessageService
from ..features.components.services.registry import ComponentRegistry
from ..features.events.entities import EventTransport
from ..features.events.services import EventBus
from ..features.files.services import FileObjectService, FilesService, QuotaService, StorageCleanup
from ..features.forums.services import ForumPostService, ForumService
from ..features.loaders import Loaders
from ..features.notifications.services import MentionService, NotificationService
from ..features.pages.services import PageService
from ..features.permissions.services import PermissionService
from ..features.planets.repositories import InviteRepository, PlanetRepository
from ..features.planets.services import InviteService, PlanetService
from ..features.reactions.services import CustomEmojiService, ReactionService
from ..features.storage.entities import ObjectStorage
from ..features.store.entities import EntityStore
from ..features.users.repositories import UserRepository
from ..features.users.services import TokenService, UserService
from ..features.wikis.services import WikiService


@dataclass
class Services:
    settings: StarshipSettings
    store: EntityStore
    transport: EventTransport
    storage: ObjectStorage
    bus: EventBus
    tokens: TokenService
    users: UserService
    permissions: PermissionService
    notifications: NotificationService
    mentions: MentionService
    reactions: ReactionService
    custom_emojis: CustomEmojiService
    planets: PlanetService
    invites: InviteService
    components: ComponentRegistry
    pages: PageService
    wikis: WikiService
    forums: ForumService
    forum_posts: ForumPostService
    files: FilesService
    file_objects: FileObjectService
    quota: QuotaService
    cleanup: StorageCleanup
    chats: ChatService
    channels: ChannelService
    messages: MessageService

    def loaders(self) -> Loaders:
        """A fresh loader set; call once per request."""
        return Loaders(self.store)


def build_services(
    settings: StarshipSettings,
    store: EntityStore,
    transport: EventTransport,
    storage: ObjectStorage,
) -> Services:
    user_repository = UserRepository(store)
    planet_repository = PlanetRepository(store)
    permissions = PermissionService(user_repository, planet_repository)
    bus = EventBus(transport)
    tokens = TokenService(settings)

    notifications = NotificationService(store, bus)
    mentions = MentionService(user_repository, notifications)
    reactions = ReactionService(store)
    quota = QuotaService(user_repository, settings.upload_cap_bytes)
    cleanup = StorageCleanup(storage)

    pages = PageService(store, permissions)
    wikis = WikiService(store, permissions)
    forums = ForumService(store, permissions)
    files = FilesService(store, permissions, quota, cleanup)
    chats = ChatService(store, permissions)
    components = ComponentRegistry(pages=pages, wikis=wikis, forums=forums, files=files, chats=chats)

    return Services(
        settings=settings,
        store=store,
        transport=transport,
        storage=storage,
        bus=bus,
        tokens=tokens,
        users=UserService(user_repository, tokens),
        permissions=permissions,
        notifications=notifications,
        mentions=mentions,
        reactions=reactions,
        custom_emojis=CustomEmojiService(store, permissions),
        planets=PlanetService(planet_repository, user_repository, permissions, components),
        invites=InviteService(InviteRepository(store), planet_repository, permissions),
        components=components,
        pages=pages,
        wikis=wikis,
        forums=forums,
        forum_posts=ForumPostService(store, permissions, reactions, mentions, settings.site_url),
        files=files,
        file_objects=FileObjectService(store, permissions, storage, quota, cleanup, settings),
        quota=quota,
        cleanup=cleanup,
        chats=chats,
        channels=ChannelService(store, permissions, user_repository),
        messages=MessageService(store, permissions, bus, reactions, mentions, settings.site_url),
    )
