"""Helpers shared by the component services."""

from typing import Optional, TypeVar

from ....core.context import RequestContext
from ....core.exceptions import NotFoundError
from ...permissions.services.permission_service import PermissionService
from ...store.repositories.base import DocumentEntity, DocumentRepository

E = TypeVar("E", bound=DocumentEntity)


def caller_id(context: RequestContext) -> Optional[str]:
    return context.user.id if context.user else None


class ComponentAccess:
    """Existence plus permission checks in one place."""

    def __init__(self, permissions: PermissionService):
        self.permissions = permissions

    @staticmethod
    async def fetch(repository: DocumentRepository[E], entity_id: str) -> E:
        entity = await repository.get(entity_id)
        if entity is None:
            raise NotFoundError()
        return entity

    async def readable(self, context: RequestContext, repository: DocumentRepository[E], entity_id: str) -> E:
        """Fetch an entity carrying a ``planet`` field, hidden unless readable."""
        entity = await self.fetch(repository, entity_id)
        await self.permissions.ensure_read(caller_id(context), entity.planet)
        return entity

    async def loaded_readable(self, context: RequestContext, loader, entity_id: str):
        """Like ``readable`` but resolved through one of the request loaders."""
        entity = await loader.load(entity_id)
        if entity is None:
            raise NotFoundError()
        await self.permissions.ensure_read(caller_id(context), entity.planet)
        return entity

    async def full_writable(self, context: RequestContext, repository: DocumentRepository[E], entity_id: str) -> E:
        me = context.require_user()
        entity = await self.fetch(repository, entity_id)
        await self.permissions.ensure_full_write(me.id, entity.planet)
        return entity

    async def public_writable(self, context: RequestContext, repository: DocumentRepository[E], entity_id: str) -> E:
        me = context.require_user()
        entity = await self.fetch(repository, entity_id)
        await self.permissions.ensure_public_write(me.id, entity.planet)
        return entity

    async def owner_or_full_writable(
        self, context: RequestContext, repository: DocumentRepository[E], entity_id: str
    ) -> E:
        """Creators edit their own content while they may still post; others need full write."""
        me = context.require_user()
        entity = await self.fetch(repository, entity_id)
        if entity.owner == me.id:
            await self.permissions.ensure_public_write(me.id, entity.planet)
        else:
            await self.permissions.ensure_full_write(me.id, entity.planet)
        return entity
