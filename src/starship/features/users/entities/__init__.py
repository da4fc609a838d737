from .user import PUBLIC_USER_FIELDS, PublicUser, User

__all__ = ["PUBLIC_USER_FIELDS", "PublicUser", "User"]
