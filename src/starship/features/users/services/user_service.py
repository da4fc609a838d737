"""User service for account and profile business logic."""

import logging
import re
from typing import Optional, Tuple

import bcrypt

from ....config.constants import MIN_PASSWORD_LENGTH, USERNAME_PATTERN, MentionSetting
from ....core.context import RequestContext
from ....core.exceptions import BadSessionError, ConflictError, NotFoundError, ValidationError
from ...store.repositories.base import generate_id
from ..entities.user import PublicUser, User
from ..repositories.user_repository import UserRepository
from .token_service import TokenService

logger = logging.getLogger(__name__)

_USERNAME = re.compile(USERNAME_PATTERN)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


class UserService:
    """Service for user business logic."""

    def __init__(self, user_repository: UserRepository, token_service: TokenService):
        """Initialize user service."""
        self.user_repository = user_repository
        self.token_service = token_service

    async def register(self, username: str, email: str, password: str) -> Tuple[User, str]:
        """Create an account and return it together with a session token."""
        if not _USERNAME.match(username):
            raise ValidationError("Usernames may only contain letters, numbers, dots, dashes and underscores.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters long.")
        if await self.user_repository.find_one({"$or": [{"username": username}, {"email": email}]}):
            raise ConflictError("That username or email is already in use.")

        user = User(id=generate_id(), username=username, email=email, password=hash_password(password))
        user = await self.user_repository.insert(user)
        logger.info(f"Registered user {user.username} ({user.id})")
        return user, self.token_service.issue(user)

    async def login(self, username: str, password: str) -> str:
        user = await self.user_repository.get_by_username(username)
        if not user or not verify_password(password, user.password):
            raise BadSessionError("Invalid username or password.")
        if user.banned:
            raise BadSessionError("This account has been banned.")
        return self.token_service.issue(user)

    async def current_user(self, context: RequestContext) -> User:
        token = context.require_user()
        user = await self.user_repository.get(token.id)
        if not user:
            raise BadSessionError()
        return user

    async def get_public(self, context: RequestContext, user_id: str) -> PublicUser:
        user = await context.loaders.users.load(user_id)
        if user is None:
            raise NotFoundError()
        return user

    async def set_banned(self, user_id: str, banned: bool) -> User:
        """Global ban toggle. Callers must have checked the admin tier."""
        user = await self.user_repository.update_by_id(user_id, {"$set": {"banned": banned}})
        if not user:
            raise NotFoundError()
        logger.info(f"User {user_id} banned={banned}")
        return user

    async def block(self, context: RequestContext, user_id: str) -> User:
        me = context.require_user()
        if user_id == me.id:
            raise ValidationError("You can't block yourself.")
        if not await self.user_repository.get(user_id):
            raise NotFoundError()
        return await self.user_repository.update_by_id(me.id, {"$addToSet": {"blocked": user_id}})

    async def unblock(self, context: RequestContext, user_id: str) -> User:
        me = context.require_user()
        return await self.user_repository.update_by_id(me.id, {"$pull": {"blocked": user_id}})

    async def update_profile(
        self,
        context: RequestContext,
        bio: Optional[str] = None,
        picture: Optional[str] = None,
        banner: Optional[str] = None,
        mention_setting: Optional[int] = None,
    ) -> User:
        me = context.require_user()
        changes = {}
        if bio is not None:
            changes["profile_bio"] = bio
        if picture is not None:
            changes["profile_picture"] = picture
        if banner is not None:
            changes["profile_banner"] = banner
        if mention_setting is not None:
            if mention_setting not in MentionSetting._value2member_map_:
                raise ValidationError("Unknown mention setting.")
            changes["mention_setting"] = int(mention_setting)
        if not changes:
            return await self.current_user(context)
        return await self.user_repository.update_by_id(me.id, {"$set": changes})

    async def add_session(self, user_id: str, session_id: str) -> None:
        await self.user_repository.update_by_id(user_id, {"$addToSet": {"sessions": session_id}})

    async def remove_session(self, user_id: str, session_id: str) -> None:
        await self.user_repository.update_by_id(user_id, {"$pull": {"sessions": session_id}})
