"""User repository."""

import logging
from typing import List, Optional

from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository
from ..entities.user import PublicUser, User

logger = logging.getLogger(__name__)


class UserRepository(DocumentRepository[User]):
    """Repository for user documents."""

    def __init__(self, store: EntityStore):
        super().__init__(store.collection(Collections.USERS), User)

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self.find_one({"username": username})

    async def get_by_usernames(self, usernames: List[str]) -> List[User]:
        return await self.find({"username": {"$in": usernames}})

    async def get_public_many(self, ids: List[str]) -> List[PublicUser]:
        return [user.public() for user in await self.get_many(ids)]

    async def adjust_used_bytes(self, user_id: str, delta: int) -> Optional[User]:
        """Atomically move the quota counter by ``delta`` bytes."""
        return await self.update_by_id(user_id, {"$inc": {"used_bytes": delta}})
