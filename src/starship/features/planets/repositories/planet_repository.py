"""Planet and invite repositories."""

from typing import List

from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository
from ..entities.planet import Invite, Planet


class PlanetRepository(DocumentRepository[Planet]):
    def __init__(self, store: EntityStore):
        super().__init__(store.collection(Collections.PLANETS), Planet)

    async def featured(self) -> List[Planet]:
        return await self.find({"featured": True, "private": False}, sort=[("follower_count", -1)])


class InviteRepository(DocumentRepository[Invite]):
    def __init__(self, store: EntityStore):
        super().__init__(store.collection(Collections.INVITES), Invite)
