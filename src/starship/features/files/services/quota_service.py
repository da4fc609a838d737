"""Per-user storage quota.

``used_bytes`` moves only through ``charge`` and ``refund``, each a single
``$inc``. The cap gates new uploads, never existing files.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Tuple

from ....core.exceptions import ForbiddenError, NotFoundError
from ...users.entities.user import User
from ...users.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class QuotaService:
    def __init__(self, user_repository: UserRepository, cap_bytes: int):
        self.user_repository = user_repository
        self.cap_bytes = cap_bytes

    def can_upload(self, user: User) -> bool:
        return user.cap_waived or user.used_bytes <= self.cap_bytes

    async def ensure_can_upload(self, user_id: str) -> User:
        user = await self.user_repository.get(user_id)
        if user is None:
            raise NotFoundError()
        if not self.can_upload(user):
            raise ForbiddenError("You have reached your storage limit.")
        return user

    async def charge(self, user_id: str, size: int) -> None:
        if size:
            await self.user_repository.adjust_used_bytes(user_id, size)

    async def refund(self, user_id: str, size: int) -> None:
        if size:
            await self.user_repository.adjust_used_bytes(user_id, -size)

    async def refund_many(self, owners_and_sizes: Iterable[Tuple[str, int]]) -> None:
        """One decrement per owner for a batch of deleted objects."""
        totals: Dict[str, int] = defaultdict(int)
        for owner, size in owners_and_sizes:
            totals[owner] += size
        for owner, total in totals.items():
            await self.refund(owner, total)
