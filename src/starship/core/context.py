"""Per-request context.

A RequestContext is built fresh for every HTTP request, GraphQL operation
and subscription connection, then passed explicitly into each service call.
Nothing about the caller lives in module level state.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from .exceptions import BadSessionError

if TYPE_CHECKING:
    from ..features.loaders import Loaders


@dataclass(frozen=True)
class UserToken:
    """Identity claims decoded from a session token."""
    id: str
    username: str
    admin: bool = False


@dataclass
class RequestContext:
    """Request context entity.

    Carries the caller identity (if any) and the request-scoped loaders.
    """

    loaders: "Loaders"
    user: Optional[UserToken] = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_authenticated(self) -> bool:
        """Check if request is authenticated."""
        return self.user is not None

    def require_user(self) -> UserToken:
        """Return the caller or raise BadSessionError when anonymous."""
        if self.user is None:
            raise BadSessionError()
        return self.user
