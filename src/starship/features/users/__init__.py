"""Users: accounts, sessions and the public profile projection."""

from .entities import PublicUser, User
from .repositories import UserRepository
from .services import TokenService, UserService

__all__ = ["PublicUser", "User", "UserRepository", "TokenService", "UserService"]
