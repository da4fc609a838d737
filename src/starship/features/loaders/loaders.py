"""The set of loaders attached to one request.

Each attribute is a strawberry ``DataLoader``: every ``load`` issued during
one turn of the event loop is collected into a single ``$in`` query against
the entity store, and each id is fetched at most once per instance.
"""

from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from strawberry.dataloader import DataLoader

from ..chats.entities import Attachment, Channel, Chat, Message
from ..files.entities import FileObject, Files
from ..forums.entities import Forum, ForumPost
from ..pages.entities import Page
from ..planets.entities import Planet
from ..store.entities import Collections, EntityStore
from ..users.entities import PublicUser
from ..wikis.entities import Wiki

T = TypeVar("T")


def _by_id(store: EntityStore, collection: str, build: Callable[[dict], T]):
    """Batch function fetching ``collection`` by id, aligned with the input.

    Ids the store does not return resolve to None instead of failing the
    sibling loads of the same batch.
    """
    async def batch(ids: List[str]) -> Sequence[Optional[T]]:
        documents = await store.collection(collection).find_many({"id": {"$in": list(ids)}})
        found: Dict[str, T] = {doc["id"]: build(doc) for doc in documents}
        return [found.get(entity_id) for entity_id in ids]
    return batch


def _loader(store: EntityStore, collection: str, build: Callable[[dict], T]) -> DataLoader:
    return DataLoader(load_fn=_by_id(store, collection, build))


class Loaders:
    """Fresh per request; never shared across requests or users."""

    def __init__(self, store: EntityStore):
        # Other users are rendered through this loader, so it only ever
        # returns the public projection
        self.users: DataLoader[str, Optional[PublicUser]] = _loader(
            store, Collections.USERS, PublicUser.from_document
        )
        self.planets: DataLoader[str, Optional[Planet]] = _loader(store, Collections.PLANETS, Planet.from_document)

        self.pages: DataLoader[str, Optional[Page]] = _loader(store, Collections.PAGES, Page.from_document)
        self.wikis: DataLoader[str, Optional[Wiki]] = _loader(store, Collections.WIKIS, Wiki.from_document)
        self.forums: DataLoader[str, Optional[Forum]] = _loader(store, Collections.FORUMS, Forum.from_document)
        self.files: DataLoader[str, Optional[Files]] = _loader(store, Collections.FILES, Files.from_document)
        self.chats: DataLoader[str, Optional[Chat]] = _loader(store, Collections.CHATS, Chat.from_document)

        self.forum_posts: DataLoader[str, Optional[ForumPost]] = _loader(
            store, Collections.FORUM_POSTS, ForumPost.from_document
        )
        self.file_objects: DataLoader[str, Optional[FileObject]] = _loader(
            store, Collections.FILE_OBJECTS, FileObject.from_document
        )
        self.channels: DataLoader[str, Optional[Channel]] = _loader(store, Collections.CHANNELS, Channel.from_document)
        self.messages: DataLoader[str, Optional[Message]] = _loader(store, Collections.MESSAGES, Message.from_document)
        self.attachments: DataLoader[str, Optional[Attachment]] = _loader(
            store, Collections.ATTACHMENTS, Attachment.from_document
        )
