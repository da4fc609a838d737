"""User domain entity."""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ....config.constants import MentionSetting
from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class User(DocumentEntity):
    """User domain entity.

    ``admin`` and ``banned`` are global roles. ``used_bytes`` is a derived
    counter maintained only by the file lifecycle.
    """

    id: str
    username: str
    email: Optional[str] = None
    password: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    # Roles
    admin: bool = False
    banned: bool = False

    # Relations
    following: List[str] = field(default_factory=list)
    blocked: List[str] = field(default_factory=list)
    sessions: List[str] = field(default_factory=list)

    # Profile
    profile_picture: Optional[str] = None
    profile_banner: Optional[str] = None
    profile_bio: Optional[str] = None
    mention_setting: int = MentionSetting.ALL_MENTIONS

    # Storage quota
    used_bytes: int = 0
    cap_waived: bool = False

    # Credentials
    reset_token: Optional[str] = None
    reset_expiry: Optional[datetime] = None
    tfa_secret: Optional[str] = None
    tfa_enabled: bool = False
    backup_codes: List[int] = field(default_factory=list)

    @property
    def online(self) -> bool:
        return bool(self.sessions)

    def public(self) -> "PublicUser":
        """Projection that is safe to render inside another user's response."""
        return PublicUser(
            id=self.id,
            username=self.username,
            created_at=self.created_at,
            profile_picture=self.profile_picture,
            profile_banner=self.profile_banner,
            profile_bio=self.profile_bio,
            admin=self.admin,
            banned=self.banned,
            online=self.online,
        )


@dataclass(frozen=True)
class PublicUser:
    """Redacted view of a user."""

    id: str
    username: str
    created_at: datetime
    profile_picture: Optional[str] = None
    profile_banner: Optional[str] = None
    profile_bio: Optional[str] = None
    admin: bool = False
    banned: bool = False
    online: bool = False

    @classmethod
    def from_document(cls, document: dict) -> "PublicUser":
        return User.from_document(document).public()


PUBLIC_USER_FIELDS = tuple(f.name for f in dataclasses.fields(PublicUser))
