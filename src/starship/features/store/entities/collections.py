"""Collection names used by the services."""


class Collections:
    USERS = "users"
    PLANETS = "planets"
    INVITES = "invites"
    NOTIFICATIONS = "notifications"
    CUSTOM_EMOJIS = "custom_emojis"
    PAGES = "pages"
    WIKIS = "wikis"
    WIKI_PAGES = "wiki_pages"
    FORUMS = "forums"
    FORUM_POSTS = "forum_posts"
    FORUM_REPLIES = "forum_replies"
    FILES = "files"
    FILE_OBJECTS = "file_objects"
    DOWNLOAD_TICKETS = "download_tickets"
    CHATS = "chats"
    CHANNELS = "channels"
    MESSAGES = "messages"
    ATTACHMENTS = "attachments"

    ALL = (
        USERS, PLANETS, INVITES, NOTIFICATIONS, CUSTOM_EMOJIS, PAGES, WIKIS,
        WIKI_PAGES, FORUMS, FORUM_POSTS, FORUM_REPLIES, FILES, FILE_OBJECTS,
        DOWNLOAD_TICKETS, CHATS, CHANNELS, MESSAGES, ATTACHMENTS,
    )
