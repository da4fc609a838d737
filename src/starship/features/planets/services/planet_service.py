"""Planet lifecycle, membership, moderation and component management."""

import logging
from typing import List, Optional

from ....core.context import RequestContext
from ....core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ...components.services.registry import ComponentRegistry, parse_component_type
from ...permissions.services.permission_service import PermissionService
from ...store.repositories.base import generate_id, set_fields
from ...users.repositories.user_repository import UserRepository
from ..entities.planet import Planet
from ..repositories.planet_repository import PlanetRepository

logger = logging.getLogger(__name__)

MAX_PLANET_NAME = 64


def _valid_name(name: str) -> str:
    name = name.strip()
    if not name or len(name) > MAX_PLANET_NAME:
        raise ValidationError(f"Names must be between 1 and {MAX_PLANET_NAME} characters long.")
    return name


class PlanetService:
    """Operations on planets, gated by the permission tiers."""

    def __init__(
        self,
        planet_repository: PlanetRepository,
        user_repository: UserRepository,
        permissions: PermissionService,
        components: ComponentRegistry,
    ):
        self.planet_repository = planet_repository
        self.user_repository = user_repository
        self.permissions = permissions
        self.components = components

    async def _updated(self, planet_id: str, update) -> Planet:
        planet = await self.planet_repository.update_by_id(planet_id, update)
        if planet is None:
            raise NotFoundError("Planet not found.")
        return planet

    async def create(self, context: RequestContext, name: str) -> Planet:
        """Create a public planet owned (and followed) by the caller."""
        me = context.require_user()
        planet = await self.planet_repository.insert(
            Planet(id=generate_id(), name=_valid_name(name), owner=me.id, follower_count=1)
        )
        await self.user_repository.update_by_id(me.id, {"$addToSet": {"following": planet.id}})
        logger.info(f"User {me.id} created planet {planet.id}")
        return planet

    async def get(self, context: RequestContext, planet_id: str) -> Planet:
        user_id = context.user.id if context.user else None
        return await self.permissions.ensure_read(user_id, planet_id)

    async def featured(self) -> List[Planet]:
        return await self.planet_repository.featured()

    async def admin_list(self, context: RequestContext, skip: int = 0, limit: int = 50) -> List[Planet]:
        me = context.require_user()
        await self.permissions.ensure_admin(me.id)
        return await self.planet_repository.find({}, sort=[("created_at", -1)], skip=skip, limit=limit)

    # Following

    async def follow(self, context: RequestContext, planet_id: str) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_read(me.id, planet_id)
        added = await self.user_repository.update(
            {"id": me.id, "following": {"$ne": planet_id}}, {"$addToSet": {"following": planet_id}}
        )
        if added is None:
            return await self.planet_repository.get(planet_id)
        return await self._updated(planet_id, {"$inc": {"follower_count": 1}})

    async def unfollow(self, context: RequestContext, planet_id: str) -> Planet:
        me = context.require_user()
        removed = await self.user_repository.update(
            {"id": me.id, "following": planet_id}, {"$pull": {"following": planet_id}}
        )
        if removed is None:
            planet = await self.planet_repository.get(planet_id)
            if planet is None:
                raise NotFoundError("Planet not found.")
            return planet
        return await self._updated(planet_id, {"$inc": {"follower_count": -1}})

    # Settings

    async def rename(self, context: RequestContext, planet_id: str, name: str) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self._updated(planet_id, set_fields(name=_valid_name(name)))

    async def toggle_private(self, context: RequestContext, planet_id: str) -> Planet:
        me = context.require_user()
        planet = await self.permissions.ensure_full_write(me.id, planet_id)
        return await self._updated(planet_id, set_fields(private=not planet.private))

    async def set_description(self, context: RequestContext, planet_id: str, description: Optional[str]) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self._updated(planet_id, set_fields(description=description))

    # Components

    async def add_component(self, context: RequestContext, planet_id: str, component_type: str, name: str) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        kind = parse_component_type(component_type)
        handler = self.components.handler(kind)
        component = await handler.create(planet_id, me.id)
        entry = {"component_id": component.id, "type": kind.value, "name": _valid_name(name)}
        planet = await self.planet_repository.update_by_id(
            planet_id, {"$push": {"components": entry}, "$set": {"updated_at": component.created_at}}
        )
        if planet is None:
            await handler.delete(component.id)
            raise NotFoundError("Planet not found.")
        logger.info(f"Added {kind.value} component {component.id} to planet {planet_id}")
        return planet

    async def remove_component(self, context: RequestContext, planet_id: str, component_id: str) -> Planet:
        me = context.require_user()
        planet = await self.permissions.ensure_full_write(me.id, planet_id)
        entry = planet.component_entry(component_id)
        if entry is None:
            raise NotFoundError("Component not found.")
        planet = await self._updated(planet_id, {"$pull": {"components": {"component_id": component_id}}})
        await self.components.handler(parse_component_type(entry["type"])).delete(component_id)
        return planet

    async def rename_component(self, context: RequestContext, planet_id: str, component_id: str, name: str) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        planet = await self.planet_repository.update(
            {"id": planet_id, "components": {"$elemMatch": {"component_id": component_id}}},
            {"$set": {"components.$.name": _valid_name(name)}},
        )
        if planet is None:
            raise NotFoundError("Component not found.")
        return planet

    # Moderation

    async def ban(self, context: RequestContext, planet_id: str, user_id: str) -> Planet:
        """Ban a user from the planet, dropping their membership in the same update."""
        me = context.require_user()
        planet = await self.permissions.ensure_full_write(me.id, planet_id)
        if user_id == planet.owner:
            raise ForbiddenError("The owner of a planet can't be banned.")
        if not await self.user_repository.get(user_id):
            raise NotFoundError("User not found.")
        return await self._updated(
            planet_id, {"$addToSet": {"banned": user_id}, "$pull": {"members": user_id}}
        )

    async def unban(self, context: RequestContext, planet_id: str, user_id: str) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self._updated(planet_id, {"$pull": {"banned": user_id}})

    async def remove_member(self, context: RequestContext, planet_id: str, user_id: str) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self._updated(planet_id, {"$pull": {"members": user_id}})

    async def apply_admin_flags(
        self,
        context: RequestContext,
        planet_id: str,
        featured: Optional[bool] = None,
        verified: Optional[bool] = None,
        partnered: Optional[bool] = None,
        featured_description: Optional[str] = None,
    ) -> Planet:
        me = context.require_user()
        await self.permissions.ensure_admin(me.id)
        changes = {
            key: value
            for key, value in {
                "featured": featured,
                "verified": verified,
                "partnered": partnered,
                "featured_description": featured_description,
            }.items()
            if value is not None
        }
        if not changes:
            planet = await self.planet_repository.get(planet_id)
            if planet is None:
                raise NotFoundError("Planet not found.")
            return planet
        return await self._updated(planet_id, {"$set": changes})
