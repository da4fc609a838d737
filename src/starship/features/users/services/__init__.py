from .token_service import TokenService
from .user_service import UserService, hash_password, verify_password

__all__ = ["TokenService", "UserService", "hash_password", "verify_password"]
