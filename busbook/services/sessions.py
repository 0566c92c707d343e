import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from redis.exceptions import RedisError

from busbook.config import settings
from busbook.errors import StorageFailureError
from busbook.redis_client import redis_client

logger = logging.getLogger(__name__)

SESSION_KEY_TPL = "session:{jti}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Maps opaque session tokens to user ids.

    Tokens are signed JWTs carrying a ``jti``; the session only exists while
    ``session:<jti>`` is present in Redis, so logging out revokes the token
    before it expires.
    """

    def __init__(self, redis=None, ttl: Optional[int] = None):
        self.redis = redis or redis_client
        self.ttl = ttl or settings.SESSION_TTL_SECONDS

    async def create(self, user_id: int) -> str:
        jti = uuid.uuid4().hex
        expire = _now() + timedelta(seconds=self.ttl)
        payload = {"sub": str(user_id), "type": "session", "jti": jti, "exp": int(expire.timestamp())}
        token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        try:
            await self.redis.set(SESSION_KEY_TPL.format(jti=jti), str(user_id), ex=self.ttl)
        except RedisError as exc:
            logger.exception("Session store unavailable")
            raise StorageFailureError() from exc
        return token

    @staticmethod
    def _claims(token: str) -> Optional[dict]:
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except JWTError:
            return None
        if payload.get("type") != "session" or not payload.get("jti"):
            return None
        return payload

    async def resolve(self, token: Optional[str]) -> Optional[int]:
        """User id behind ``token``, or None for an anonymous caller."""
        if not token:
            return None
        claims = self._claims(token)
        if claims is None:
            return None
        try:
            val = await self.redis.get(SESSION_KEY_TPL.format(jti=claims["jti"]))
        except RedisError as exc:
            logger.exception("Session store unavailable")
            raise StorageFailureError() from exc
        if isinstance(val, bytes):
            val = val.decode()
        if not val or val != claims.get("sub"):
            return None
        return int(val)

    async def destroy(self, token: Optional[str]) -> None:
        claims = self._claims(token) if token else None
        if claims is None:
            # already invalid
            return None
        try:
            await self.redis.delete(SESSION_KEY_TPL.format(jti=claims["jti"]))
        except RedisError as exc:
            logger.exception("Session store unavailable")
            raise StorageFailureError() from exc
