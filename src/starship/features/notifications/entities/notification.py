from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Notification(DocumentEntity):
    id: str
    user: str
    text: str
    icon: str = "notification"
    to_url: Optional[str] = None
    is_read: bool = False
    created_at: datetime = field(default_factory=utc_now)
