"""@mention extraction and notification."""

import logging
import re
from typing import List, Optional

from ....config.constants import MentionSetting
from ...planets.entities.planet import Planet
from ...users.entities.user import User
from ...users.repositories.user_repository import UserRepository
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

_MENTION = re.compile(r"@([-.\w]+)")


def extract_usernames(text: str) -> List[str]:
    seen = []
    for name in _MENTION.findall(text):
        if name not in seen:
            seen.append(name)
    return seen


def wants_notification(user: User, author_id: str, planet: Optional[Planet]) -> bool:
    """Apply the mentioned user's mention setting and block list."""
    if author_id in user.blocked:
        return False
    is_direct = planet is None
    is_member = planet is not None and planet.is_member(user.id)
    is_following = planet is not None and planet.id in user.following
    setting = user.mention_setting
    if setting == MentionSetting.ALL_MENTIONS:
        return True
    if setting == MentionSetting.FOLLOWING:
        return is_following or is_member or is_direct
    if setting == MentionSetting.MEMBERS_ONLY:
        return is_member or is_direct
    if setting == MentionSetting.MESSAGES_ONLY:
        return is_direct
    return False


class MentionService:
    def __init__(self, user_repository: UserRepository, notifications: NotificationService):
        self.user_repository = user_repository
        self.notifications = notifications

    async def process(
        self,
        text: str,
        author_id: str,
        author_name: str,
        descriptor: str,
        planet: Optional[Planet] = None,
        to_url: Optional[str] = None,
    ) -> List[str]:
        """Notify everyone mentioned in ``text``; return the mentioned user ids."""
        usernames = extract_usernames(text)
        if not usernames:
            return []
        mentioned = await self.user_repository.get_by_usernames(usernames)
        for user in mentioned:
            if user.id != author_id and wants_notification(user, author_id, planet):
                await self.notifications.create(
                    user.id, f"{author_name} mentioned you in {descriptor}.", "comment", to_url
                )
        return [user.id for user in mentioned]
