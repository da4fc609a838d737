"""Wiki component and wiki pages."""

import logging
from typing import List

from ....core.context import RequestContext
from ....core.exceptions import ValidationError
from ...components.services.access import ComponentAccess
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id, set_fields
from ..entities.wiki import Wiki, WikiPage

logger = logging.getLogger(__name__)


class WikiService(ComponentAccess):
    def __init__(self, store: EntityStore, permissions):
        super().__init__(permissions)
        self.wikis = DocumentRepository(store.collection(Collections.WIKIS), Wiki)
        self.wiki_pages = DocumentRepository(store.collection(Collections.WIKI_PAGES), WikiPage)

    async def create_component(self, planet_id: str, owner_id: str) -> Wiki:
        return await self.wikis.insert(Wiki(id=generate_id(), owner=owner_id, planet=planet_id))

    async def delete_component(self, component_id: str) -> None:
        await self.wikis.delete({"id": component_id})
        removed = await self.wiki_pages.delete_many({"wiki_id": component_id})
        logger.debug(f"Deleted wiki {component_id} with {removed} pages")

    async def get(self, context: RequestContext, wiki_id: str) -> Wiki:
        return await self.loaded_readable(context, context.loaders.wikis, wiki_id)

    async def pages(self, context: RequestContext, wiki_id: str) -> List[WikiPage]:
        await self.readable(context, self.wikis, wiki_id)
        return await self.wiki_pages.find({"wiki_id": wiki_id}, sort=[("created_at", 1)])

    async def get_page(self, context: RequestContext, page_id: str) -> WikiPage:
        return await self.readable(context, self.wiki_pages, page_id)

    async def insert_page(self, context: RequestContext, wiki_id: str, name: str, content: str) -> WikiPage:
        wiki = await self.full_writable(context, self.wikis, wiki_id)
        if not name.strip():
            raise ValidationError("Wiki pages need a name.")
        page = WikiPage(
            id=generate_id(),
            wiki_id=wiki.id,
            planet=wiki.planet,
            owner=context.user.id,
            name=name,
            content=content,
        )
        return await self.wiki_pages.insert(page)

    async def update_page(self, context: RequestContext, page_id: str, content: str) -> WikiPage:
        await self.full_writable(context, self.wiki_pages, page_id)
        return await self.wiki_pages.update_by_id(page_id, set_fields(content=content))

    async def rename_page(self, context: RequestContext, page_id: str, name: str) -> WikiPage:
        await self.full_writable(context, self.wiki_pages, page_id)
        if not name.strip():
            raise ValidationError("Wiki pages need a name.")
        return await self.wiki_pages.update_by_id(page_id, set_fields(name=name))

    async def remove_page(self, context: RequestContext, page_id: str) -> bool:
        await self.full_writable(context, self.wiki_pages, page_id)
        await self.wiki_pages.delete({"id": page_id})
        return True
