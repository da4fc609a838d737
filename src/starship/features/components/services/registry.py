"""Per-variant component handlers.

Planets address components through ``{component_id, type, name}``
entries. Creating or deleting one goes through the handler of its type,
chosen by an exhaustive match over ``ComponentType``.
"""

import logging
from typing import Optional, Protocol, Union, assert_never

from ....config.constants import ComponentType
from ....core.exceptions import ValidationError
from ...store.repositories.base import DocumentRepository
from ..entities.component import Component

logger = logging.getLogger(__name__)


class ComponentService(Protocol):
    async def create_component(self, planet_id: str, owner_id: str) -> Component:
        ...

    async def delete_component(self, component_id: str) -> None:
        ...


class ComponentHandler:
    """Create, cascade-delete and look up one component variant."""

    def __init__(self, service: ComponentService, repository: DocumentRepository):
        self.service = service
        self.repository = repository

    async def create(self, planet_id: str, owner_id: str) -> Component:
        return await self.service.create_component(planet_id, owner_id)

    async def delete(self, component_id: str) -> None:
        await self.service.delete_component(component_id)

    async def get(self, component_id: str) -> Optional[Component]:
        return await self.repository.get(component_id)


def parse_component_type(value: Union[str, ComponentType]) -> ComponentType:
    try:
        return ComponentType(value)
    except ValueError:
        raise ValidationError(f"Unknown component type: {value}")


class ComponentRegistry:
    def __init__(self, pages, wikis, forums, files, chats):
        self.page = ComponentHandler(pages, pages.pages)
        self.wiki = ComponentHandler(wikis, wikis.wikis)
        self.forum = ComponentHandler(forums, forums.forums)
        self.files = ComponentHandler(files, files.files)
        self.chat = ComponentHandler(chats, chats.chats)

    def handler(self, component_type: ComponentType) -> ComponentHandler:
        match component_type:
            case ComponentType.PAGE:
                return self.page
            case ComponentType.WIKI:
                return self.wiki
            case ComponentType.FORUM:
                return self.forum
            case ComponentType.FILES:
                return self.files
            case ComponentType.CHAT:
                return self.chat
            case _:
                assert_never(component_type)
