"""Files component, file objects and download tickets."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ....config.constants import ROOT_FOLDER, FileObjectType
from ...components.entities.component import Component
from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Files(Component):
    pass


@dataclass
class FileObject(DocumentEntity):
    """A file or folder inside a files component.

    ``path`` is the ordered ancestor chain starting at ``root``; ``parent``
    is always its last element. Files start pending (``finished_uploading``
    false) and count against the owner's quota once uploaded.
    """

    id: str
    component_id: str
    planet: str
    owner: str
    name: str
    type: str = FileObjectType.FILE.value
    file_type: Optional[str] = None
    path: List[str] = field(default_factory=lambda: [ROOT_FOLDER])
    parent: str = ROOT_FOLDER
    key: Optional[str] = None
    size: int = 0
    finished_uploading: bool = False
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_folder(self) -> bool:
        return self.type == FileObjectType.FOLDER.value


@dataclass
class DownloadTicket(DocumentEntity):
    """Single use grant to download a bundle of file objects."""

    id: str
    user: Optional[str] = None
    objects: List[str] = field(default_factory=list)
    name: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
