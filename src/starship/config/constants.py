"""Shared enumerations and limits."""

from enum import Enum, IntEnum
from typing import Dict, List, Tuple


class ComponentType(str, Enum):
    """Pluggable planet component variants."""
    PAGE = "page"
    WIKI = "wiki"
    FILES = "files"
    FORUM = "forum"
    CHAT = "chat"


class ChannelType(IntEnum):
    TEXT = 0
    VOICE = 1
    DIRECT_MESSAGE = 2


class MentionSetting(IntEnum):
    """How eagerly a user wants to be notified about @mentions."""
    ALL_MENTIONS = 0
    FOLLOWING = 1
    MEMBERS_ONLY = 2
    MESSAGES_ONLY = 3
    NONE = 4


class FileObjectType(str, Enum):
    FILE = "file"
    FOLDER = "folder"


class ForumSortType(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    RECENTLY_UPDATED = "recentlyUpdated"
    LEAST_RECENTLY_UPDATED = "leastRecentlyUpdated"
    MOST_REPLIES = "mostReplies"
    FEWEST_REPLIES = "fewestReplies"


# field, direction (1 ascending, -1 descending)
FORUM_SORTS: Dict[ForumSortType, List[Tuple[str, int]]] = {
    ForumSortType.NEWEST: [("created_at", -1)],
    ForumSortType.OLDEST: [("created_at", 1)],
    ForumSortType.RECENTLY_UPDATED: [("updated_at", -1)],
    ForumSortType.LEAST_RECENTLY_UPDATED: [("updated_at", 1)],
    ForumSortType.MOST_REPLIES: [("reply_count", -1)],
    ForumSortType.FEWEST_REPLIES: [("reply_count", 1)],
}

DEFAULT_FORUM_SORT = ForumSortType.RECENTLY_UPDATED

# Content limits
MAX_MESSAGE_LENGTH = 2000
MAX_MESSAGE_ATTACHMENTS = 5
MAX_FORUM_PAGE = 25
MAX_MESSAGE_PAGE = 100
MAX_PINNED_PAGE = 25
MIN_SEARCH_LENGTH = 3
STORAGE_DELETE_BATCH = 1000

ROOT_FOLDER = "root"
CUSTOM_EMOJI_PREFIX = "ceid:"
USERNAME_PATTERN = r"^[\w.-]+$"
MIN_PASSWORD_LENGTH = 8
# Characters that may not appear in file object names
FILE_NAME_FORBIDDEN = r'[/\\?%*:|"<>]'

PAGE_PLACEHOLDER = "This is a Page. Click the Edit icon in the top right corner to get started."
