"""Planet invites."""

import logging
from typing import List

from ....core.context import RequestContext
from ....core.exceptions import ForbiddenError, NotFoundError
from ...permissions.services.permission_service import PermissionService
from ...store.repositories.base import generate_id
from ..entities.planet import Invite, Planet
from ..repositories.planet_repository import InviteRepository, PlanetRepository

logger = logging.getLogger(__name__)


class InviteService:
    def __init__(
        self,
        invite_repository: InviteRepository,
        planet_repository: PlanetRepository,
        permissions: PermissionService,
    ):
        self.invite_repository = invite_repository
        self.planet_repository = planet_repository
        self.permissions = permissions

    async def create(self, context: RequestContext, planet_id: str) -> Invite:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self.invite_repository.insert(Invite(id=generate_id(), planet=planet_id, owner=me.id))

    async def get(self, invite_id: str) -> Invite:
        invite = await self.invite_repository.get(invite_id)
        if invite is None:
            raise NotFoundError("That invite doesn't exist.")
        return invite

    async def list_for_planet(self, context: RequestContext, planet_id: str) -> List[Invite]:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self.invite_repository.find({"planet": planet_id}, sort=[("created_at", -1)])

    async def use(self, context: RequestContext, invite_id: str) -> Planet:
        """Join the invite's planet. Each invite can be used once."""
        me = context.require_user()
        invite = await self.get(invite_id)
        planet = await self.planet_repository.get(invite.planet)
        if planet is None:
            await self.invite_repository.delete({"id": invite_id})
            raise NotFoundError("The planet attached to this invite doesn't exist.")
        if me.id in planet.banned:
            raise ForbiddenError("You are banned from this planet.")

        if await self.invite_repository.delete({"id": invite_id}) is None:
            raise NotFoundError("That invite doesn't exist.")
        if planet.is_member(me.id):
            return planet
        updated = await self.planet_repository.update(
            {"id": planet.id, "banned": {"$ne": me.id}}, {"$addToSet": {"members": me.id}}
        )
        if updated is None:
            raise ForbiddenError("You are banned from this planet.")
        logger.info(f"User {me.id} joined planet {planet.id} with invite {invite_id}")
        return updated

    async def remove(self, context: RequestContext, invite_id: str) -> bool:
        me = context.require_user()
        invite = await self.get(invite_id)
        await self.permissions.ensure_full_write(me.id, invite.planet)
        await self.invite_repository.delete({"id": invite_id})
        return True
