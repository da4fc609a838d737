"""Session token issuing and validation."""

import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from ....config.settings import StarshipSettings
from ....core.context import UserToken
from ....core.exceptions import BadSessionError
from ...store.repositories.base import utc_now
from ..entities.user import User

logger = logging.getLogger(__name__)


class TokenService:
    """Issues and validates HS256 session tokens."""

    def __init__(self, settings: StarshipSettings):
        self._secret = settings.jwt_secret.get_secret_value()
        self._algorithm = settings.jwt_algorithm
        self._lifetime = timedelta(days=settings.jwt_expire_days)

    def issue(self, user: User) -> str:
        now = utc_now()
        claims = {
            "sub": user.id,
            "username": user.username,
            "admin": user.admin,
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> UserToken:
        """Decode a token into the caller identity.

        Raises:
            BadSessionError: when the token is expired, tampered or malformed
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise BadSessionError("Session expired.") from e
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            raise BadSessionError() from e

        if "sub" not in claims or "username" not in claims:
            raise BadSessionError()
        return UserToken(id=claims["sub"], username=claims["username"], admin=bool(claims.get("admin")))

    def from_authorization(self, header: Optional[str]) -> Optional[UserToken]:
        """Resolve an ``Authorization: Bearer`` header. Absent header means anonymous."""
        if not header:
            return None
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise BadSessionError()
        return self.decode(token.strip())
