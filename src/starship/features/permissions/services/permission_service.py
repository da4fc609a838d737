"""Capability-tiered access control.

Four tiers decide what a user may do on a planet:

* ``read``: public planets are readable by anyone, private planets only by
  members, the owner and global admins.
* ``public_write``: posting and reacting. Open on public planets, but
  global bans and planet bans always refuse.
* ``full_write``: structural edits and moderation. Never granted merely
  because a planet is public.
* ``admin``: the global admin flag.

The global admin bypass is evaluated before the global ban check in every
tier. Each tier accepts a resolved entity or an id; ids are resolved
through the entity store and a missing entity raises NotFoundError.
"""

import logging
from typing import Optional, Union

from ....core.exceptions import ForbiddenError, NotFoundError
from ...planets.entities.planet import Planet
from ...planets.repositories.planet_repository import PlanetRepository
from ...users.entities.user import PublicUser, User
from ...users.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

UserRef = Union[User, PublicUser, str]
PlanetRef = Union[Planet, str]


class PermissionService:
    """Pure permission decisions over users and planets."""

    def __init__(self, user_repository: UserRepository, planet_repository: PlanetRepository):
        self.user_repository = user_repository
        self.planet_repository = planet_repository

    async def _user(self, user: UserRef) -> Union[User, PublicUser]:
        if isinstance(user, str):
            resolved = await self.user_repository.get(user)
            if resolved is None:
                raise NotFoundError("User not found.")
            return resolved
        return user

    async def _planet(self, planet: PlanetRef) -> Planet:
        if isinstance(planet, str):
            resolved = await self.planet_repository.get(planet)
            if resolved is None:
                raise NotFoundError("Planet not found.")
            return resolved
        return planet

    async def read(self, user: Optional[UserRef], planet: PlanetRef) -> bool:
        planet = await self._planet(planet)
        if not planet.private:
            return True
        if user is None:
            return False
        user = await self._user(user)
        if user.admin:
            return True
        return planet.is_member(user.id)

    async def public_write(self, user: Optional[UserRef], planet: PlanetRef) -> bool:
        return await self._write(user, planet, open_when_public=True)

    async def full_write(self, user: Optional[UserRef], planet: PlanetRef) -> bool:
        return await self._write(user, planet, open_when_public=False)

    async def _write(self, user: Optional[UserRef], planet: PlanetRef, open_when_public: bool) -> bool:
        planet = await self._planet(planet)
        if user is None:
            return False
        user = await self._user(user)
        if user.admin:
            return True
        if user.banned:
            return False
        if user.id in planet.banned:
            return False
        if open_when_public and not planet.private:
            return True
        return planet.is_member(user.id)

    async def admin(self, user: UserRef) -> bool:
        user = await self._user(user)
        return bool(user.admin)

    async def ensure_read(self, user: Optional[UserRef], planet: PlanetRef) -> Planet:
        """Return the planet or raise NotFoundError when it is hidden from the caller."""
        planet = await self._planet(planet)
        if not await self.read(user, planet):
            raise NotFoundError()
        return planet

    async def ensure_public_write(self, user: Optional[UserRef], planet: PlanetRef) -> Planet:
        planet = await self.ensure_read(user, planet)
        if not await self.public_write(user, planet):
            raise ForbiddenError()
        return planet

    async def ensure_full_write(self, user: Optional[UserRef], planet: PlanetRef) -> Planet:
        planet = await self.ensure_read(user, planet)
        if not await self.full_write(user, planet):
            raise ForbiddenError()
        return planet

    async def ensure_admin(self, user: Optional[UserRef]) -> None:
        if user is None or not await self.admin(user):
            raise ForbiddenError()
