"""Page component: a single editable document."""

import logging

from ....core.context import RequestContext
from ...components.services.access import ComponentAccess
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id, set_fields
from ..entities.page import Page

logger = logging.getLogger(__name__)


class PageService(ComponentAccess):
    def __init__(self, store: EntityStore, permissions):
        super().__init__(permissions)
        self.pages = DocumentRepository(store.collection(Collections.PAGES), Page)

    async def create_component(self, planet_id: str, owner_id: str) -> Page:
        return await self.pages.insert(Page(id=generate_id(), owner=owner_id, planet=planet_id))

    async def delete_component(self, component_id: str) -> None:
        await self.pages.delete({"id": component_id})

    async def get(self, context: RequestContext, page_id: str) -> Page:
        return await self.loaded_readable(context, context.loaders.pages, page_id)

    async def update(self, context: RequestContext, page_id: str, content: str) -> Page:
        await self.full_writable(context, self.pages, page_id)
        return await self.pages.update_by_id(page_id, set_fields(content=content))
