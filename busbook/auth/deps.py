from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from busbook.config import settings
from busbook.services.facade import BookingFacade


bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_facade() -> BookingFacade:
    return BookingFacade.default()


async def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Session token from the Authorization header, falling back to the cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)
