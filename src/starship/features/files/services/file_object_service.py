"""File objects: folders, the upload lifecycle, moves and downloads.

A file starts ``pending`` when its upload URL is issued and becomes
``uploaded`` when the client confirms. The quota counter is charged once
on that transition and refunded once when the object is deleted.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ....config.constants import MIN_SEARCH_LENGTH, ROOT_FOLDER, FileObjectType
from ....config.settings import StarshipSettings
from ....core.context import RequestContext
from ....core.exceptions import NotFoundError, ValidationError
from ...components.services.access import ComponentAccess, caller_id
from ...storage.entities.protocols import ObjectStorage
from ...store.entities import Collections, EntityStore, UpdateOperation
from ...store.repositories.base import DocumentRepository, generate_id
from ..entities.files import DownloadTicket, FileObject, Files
from ..utils.names import sanitize_name, storage_key
from .quota_service import QuotaService
from .storage_cleanup import StorageCleanup

logger = logging.getLogger(__name__)


@dataclass
class UploadGrant:
    object: FileObject
    upload_url: str


@dataclass
class _Destination:
    component: Files
    folder: Optional[FileObject]

    @property
    def folder_id(self) -> str:
        return self.folder.id if self.folder else ROOT_FOLDER

    @property
    def path(self) -> List[str]:
        return self.folder.path + [self.folder.id] if self.folder else [ROOT_FOLDER]


class FileObjectService(ComponentAccess):
    def __init__(
        self,
        store: EntityStore,
        permissions,
        storage: ObjectStorage,
        quota: QuotaService,
        cleanup: StorageCleanup,
        settings: StarshipSettings,
    ):
        super().__init__(permissions)
        self.files = DocumentRepository(store.collection(Collections.FILES), Files)
        self.objects = DocumentRepository(store.collection(Collections.FILE_OBJECTS), FileObject)
        self.tickets = DocumentRepository(store.collection(Collections.DOWNLOAD_TICKETS), DownloadTicket)
        self.storage = storage
        self.quota = quota
        self.cleanup = cleanup
        self.settings = settings

    async def _destination(self, folder_id: str, files_id: Optional[str] = None) -> _Destination:
        """Resolve ``root`` of a component, or a folder, into a destination."""
        if folder_id == ROOT_FOLDER:
            if not files_id:
                raise ValidationError("A files component is required when targeting the root folder.")
            return _Destination(component=await self.fetch(self.files, files_id), folder=None)
        folder = await self.fetch(self.objects, folder_id)
        if not folder.is_folder:
            raise ValidationError("Parent is not a folder.")
        if files_id and folder.component_id != files_id:
            raise ValidationError("Cannot move across components.")
        return _Destination(component=await self.fetch(self.files, folder.component_id), folder=folder)

    # Queries

    async def get(self, context: RequestContext, object_id: str) -> FileObject:
        return await self.readable(context, self.objects, object_id)

    async def list_files(self, context: RequestContext, files_id: str, parent: str = ROOT_FOLDER) -> List[FileObject]:
        await self.readable(context, self.files, files_id)
        return await self.objects.find(
            {"component_id": files_id, "parent": parent, "type": FileObjectType.FILE.value, "finished_uploading": True},
            sort=[("name", 1)],
        )

    async def list_folders(self, context: RequestContext, files_id: str, parent: str = ROOT_FOLDER) -> List[FileObject]:
        await self.readable(context, self.files, files_id)
        return await self.objects.find(
            {"component_id": files_id, "parent": parent, "type": FileObjectType.FOLDER.value},
            sort=[("name", 1)],
        )

    async def object_array(self, context: RequestContext, ids: List[str]) -> List[FileObject]:
        objects = await self.objects.get_many(ids)
        if not objects:
            raise NotFoundError("No objects found.")
        await self.permissions.ensure_read(caller_id(context), objects[0].planet)
        if any(obj.planet != objects[0].planet for obj in objects):
            raise ValidationError("All files must be from the same planet.")
        return objects

    async def search(self, context: RequestContext, files_id: str, parent: str, text: str) -> List[FileObject]:
        component = await self.readable(context, self.files, files_id)
        if parent != ROOT_FOLDER:
            folder = await self.objects.get(parent)
            if folder is None or folder.component_id != component.id:
                raise NotFoundError("Parent not found.")
        if len(text) < MIN_SEARCH_LENGTH:
            raise ValidationError(f"Search text must be at least {MIN_SEARCH_LENGTH} characters long.")
        return await self.objects.find(
            {
                "component_id": files_id,
                "path": parent,
                "name": {"$regex": re.escape(text), "$options": "i"},
                "$or": [{"type": FileObjectType.FOLDER.value}, {"finished_uploading": True}],
            },
            sort=[("name", 1)],
        )

    # Folders

    async def create_folder(self, context: RequestContext, files_id: str, parent: str, name: str) -> FileObject:
        me = context.require_user()
        destination = await self._destination(parent, files_id)
        await self.permissions.ensure_full_write(me.id, destination.component.planet)
        folder = FileObject(
            id=generate_id(),
            component_id=destination.component.id,
            planet=destination.component.planet,
            owner=me.id,
            name=sanitize_name(name),
            type=FileObjectType.FOLDER.value,
            file_type="starship/folder",
            path=destination.path,
            parent=destination.folder_id,
        )
        return await self.objects.insert(folder)

    async def rename(self, context: RequestContext, object_id: str, name: str) -> FileObject:
        await self.full_writable(context, self.objects, object_id)
        return await self.objects.update_by_id(object_id, {"$set": {"name": sanitize_name(name)}})

    async def move(self, context: RequestContext, object_ids: List[str], parent: str) -> List[FileObject]:
        """Move objects under ``parent``, rewriting every descendant path.

        Every check runs before anything is written; all path rewrites are
        applied in one atomic bulk update.
        """
        me = context.require_user()
        unique_ids = list(dict.fromkeys(object_ids))
        objects = await self.objects.get_many(unique_ids)
        if not objects or len(objects) != len(unique_ids):
            raise NotFoundError()
        component_id = objects[0].component_id
        if any(obj.component_id != component_id for obj in objects):
            raise ValidationError("Cannot move across components.")
        await self.permissions.ensure_full_write(me.id, objects[0].planet)

        destination = await self._destination(parent, component_id)
        moved_folders = {obj.id for obj in objects if obj.is_folder}
        if destination.folder and (
            destination.folder.id in unique_ids or moved_folders.intersection(destination.folder.path)
        ):
            raise ValidationError("Cannot move an object into itself.")
        if any(moved_folders.intersection(obj.path) for obj in objects):
            raise ValidationError("Cannot move an object together with a folder containing it.")

        new_path = destination.path
        operations = []
        for obj in objects:
            if obj.is_folder:
                operations.append(UpdateOperation({"path": obj.id}, {"$pull": {"path": {"$in": obj.path}}}, many=True))
                operations.append(
                    UpdateOperation({"path": obj.id}, {"$push": {"path": {"$each": new_path, "$position": 0}}}, many=True)
                )
            operations.append(
                UpdateOperation({"id": obj.id}, {"$set": {"path": new_path, "parent": destination.folder_id}})
            )
        await self.objects.collection.bulk_update(operations)
        logger.debug(f"Moved {len(objects)} objects to {destination.folder_id}")
        return await self.objects.get_many(unique_ids)

    # Upload lifecycle

    async def upload(
        self,
        context: RequestContext,
        folder_id: str,
        name: str,
        content_type: str,
        files_id: Optional[str] = None,
    ) -> UploadGrant:
        """Create a pending file and issue a pre-signed upload URL for it."""
        me = context.require_user()
        destination = await self._destination(folder_id, files_id)
        await self.permissions.ensure_full_write(me.id, destination.component.planet)
        await self.quota.ensure_can_upload(me.id)

        name = sanitize_name(name)
        object_id = generate_id()
        key = storage_key(destination.component.id, destination.folder_id, object_id, name)
        url = await self.storage.issue_upload_url(key, content_type, self.settings.upload_url_ttl)
        pending = FileObject(
            id=object_id,
            component_id=destination.component.id,
            planet=destination.component.planet,
            owner=me.id,
            name=name,
            file_type=content_type,
            path=destination.path,
            parent=destination.folder_id,
            key=key,
            finished_uploading=False,
        )
        return UploadGrant(object=await self.objects.insert(pending), upload_url=url)

    async def complete_upload(self, context: RequestContext, object_id: str) -> FileObject:
        me = context.require_user()
        obj = await self.objects.get(object_id)
        if obj is None or obj.owner != me.id:
            raise NotFoundError()
        if obj.finished_uploading:
            raise ValidationError("This upload is already complete.")
        head = await self.storage.head_object(obj.key)
        uploaded = await self.objects.update(
            {"id": object_id, "finished_uploading": False},
            {"$set": {"finished_uploading": True, "size": head.size}},
        )
        if uploaded is None:
            raise ValidationError("This upload is already complete.")
        await self.quota.charge(me.id, head.size)
        return uploaded

    async def cancel_upload(self, context: RequestContext, object_id: str) -> bool:
        me = context.require_user()
        obj = await self.objects.get(object_id)
        if obj is None or obj.owner != me.id or obj.finished_uploading:
            raise NotFoundError()
        if not await self.objects.delete({"id": object_id, "finished_uploading": False}):
            raise NotFoundError()
        self.cleanup.schedule([obj.key])
        return True

    async def copy(
        self,
        context: RequestContext,
        object_id: str,
        folder_id: str,
        files_id: Optional[str] = None,
    ) -> FileObject:
        """Server-side copy of an uploaded file, charged to the copier."""
        me = context.require_user()
        source = await self.readable(context, self.objects, object_id)
        if source.is_folder or not source.finished_uploading:
            raise ValidationError("Only uploaded files can be copied.")
        destination = await self._destination(folder_id, files_id)
        await self.permissions.ensure_full_write(me.id, destination.component.planet)
        await self.quota.ensure_can_upload(me.id)

        copy_id = generate_id()
        key = storage_key(destination.component.id, destination.folder_id, copy_id, source.name)
        await self.storage.copy_object(source.key, key)
        copied = await self.objects.insert(
            FileObject(
                id=copy_id,
                component_id=destination.component.id,
                planet=destination.component.planet,
                owner=me.id,
                name=source.name,
                file_type=source.file_type,
                path=destination.path,
                parent=destination.folder_id,
                key=key,
                size=source.size,
                finished_uploading=True,
            )
        )
        await self.quota.charge(me.id, copied.size)
        return copied

    async def delete(self, context: RequestContext, object_id: str) -> bool:
        """Delete an object; folders take their whole subtree with them."""
        target = await self.full_writable(context, self.objects, object_id)
        doomed = [target]
        if target.is_folder:
            doomed.extend(await self.objects.find({"path": target.id}))

        deleted = []
        for obj in doomed:
            if await self.objects.delete({"id": obj.id}):
                deleted.append(obj)
        if target.id not in {obj.id for obj in deleted}:
            # Another request removed it first and already refunded its size
            raise NotFoundError()

        await self.quota.refund_many((o.owner, o.size) for o in deleted if o.finished_uploading)
        self.cleanup.schedule(o.key for o in deleted)
        return True

    # Downloads

    async def _downloadable(self, context: RequestContext, object_id: str) -> FileObject:
        obj = await self.readable(context, self.objects, object_id)
        if obj.is_folder or not obj.finished_uploading:
            raise NotFoundError()
        return obj

    async def download_url(self, context: RequestContext, object_id: str) -> str:
        obj = await self._downloadable(context, object_id)
        return await self.storage.issue_download_url(obj.key, self.settings.download_url_ttl, obj.name)

    async def preview_url(self, context: RequestContext, object_id: str) -> str:
        obj = await self._downloadable(context, object_id)
        return await self.storage.issue_download_url(obj.key, self.settings.preview_url_ttl)

    async def create_download_ticket(
        self, context: RequestContext, object_ids: List[str], name: Optional[str] = None
    ) -> DownloadTicket:
        """Bundle objects (folders expanded to their files) behind a single-use ticket."""
        objects = await self.object_array(context, object_ids)
        file_ids = []
        for obj in objects:
            if obj.is_folder:
                contained = await self.objects.find(
                    {"path": obj.id, "type": FileObjectType.FILE.value, "finished_uploading": True}
                )
                file_ids.extend(f.id for f in contained)
            elif obj.finished_uploading:
                file_ids.append(obj.id)
        if not file_ids:
            raise ValidationError("There are no files to download.")
        ticket = DownloadTicket(
            id=generate_id(),
            user=caller_id(context),
            objects=list(dict.fromkeys(file_ids)),
            name=sanitize_name(name) if name else None,
        )
        return await self.tickets.insert(ticket)

    async def redeem_ticket(self, ticket_id: str) -> Optional[Tuple[List[FileObject], Optional[str]]]:
        """Consume a ticket, returning its files and bundle name.

        Returns None when the ticket does not exist or was already used.
        """
        ticket = await self.tickets.delete({"id": ticket_id})
        if ticket is None:
            return None
        objects = await self.objects.get_many(ticket.objects)
        return [obj for obj in objects if obj.key and obj.finished_uploading], ticket.name
