"""Planet and invite entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Planet(DocumentEntity):
    """A community container and the unit of access control.

    ``members`` never includes the owner, who is implicitly a full member.
    ``components`` holds ``{"component_id", "type", "name"}`` entries.
    """

    id: str
    name: str
    owner: str
    private: bool = False
    members: List[str] = field(default_factory=list)
    banned: List[str] = field(default_factory=list)
    components: List[Dict[str, Any]] = field(default_factory=list)
    description: Optional[str] = None
    follower_count: int = 0
    featured: bool = False
    featured_description: Optional[str] = None
    verified: bool = False
    partnered: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def is_member(self, user_id: str) -> bool:
        return user_id == self.owner or user_id in self.members

    def component_entry(self, component_id: str) -> Optional[Dict[str, Any]]:
        for entry in self.components:
            if entry["component_id"] == component_id:
                return entry
        return None


@dataclass
class Invite(DocumentEntity):
    id: str
    planet: str
    owner: str
    created_at: datetime = field(default_factory=utc_now)
