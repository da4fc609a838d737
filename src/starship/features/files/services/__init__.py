from .file_object_service import FileObjectService, UploadGrant
from .files_service import FilesService
from .quota_service import QuotaService
from .storage_cleanup import StorageCleanup

__all__ = ["FileObjectService", "FilesService", "QuotaService", "StorageCleanup", "UploadGrant"]
