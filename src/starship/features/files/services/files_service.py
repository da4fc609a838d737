"""Files component lifecycle."""

import logging

from ....core.context import RequestContext
from ...components.services.access import ComponentAccess
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id
from ..entities.files import FileObject, Files
from .quota_service import QuotaService
from .storage_cleanup import StorageCleanup

logger = logging.getLogger(__name__)


class FilesService(ComponentAccess):
    def __init__(self, store: EntityStore, permissions, quota: QuotaService, cleanup: StorageCleanup):
        super().__init__(permissions)
        self.files = DocumentRepository(store.collection(Collections.FILES), Files)
        self.objects = DocumentRepository(store.collection(Collections.FILE_OBJECTS), FileObject)
        self.quota = quota
        self.cleanup = cleanup

    async def create_component(self, planet_id: str, owner_id: str) -> Files:
        return await self.files.insert(Files(id=generate_id(), owner=owner_id, planet=planet_id))

    async def delete_component(self, component_id: str) -> None:
        """Remove every object of the component, refund quotas and purge storage."""
        objects = await self.objects.find({"component_id": component_id})
        deleted = []
        for obj in objects:
            if await self.objects.delete({"id": obj.id}):
                deleted.append(obj)
        await self.quota.refund_many((o.owner, o.size) for o in deleted if o.finished_uploading)
        self.cleanup.schedule(o.key for o in deleted)
        await self.files.delete({"id": component_id})
        logger.info(f"Deleted files component {component_id} with {len(deleted)} objects")

    async def get(self, context: RequestContext, files_id: str) -> Files:
        return await self.loaded_readable(context, context.loaders.files, files_id)
