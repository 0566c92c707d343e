from typing import Optional

from fastapi import APIRouter, Depends, Response

from busbook.auth.deps import get_facade, get_session_token
from busbook.config import settings
from busbook.schemas.auth import LoginIn, RegisterIn, SessionOut, UserOut
from busbook.services.facade import BookingFacade

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=201, response_model=UserOut)
async def register(payload: RegisterIn, facade: BookingFacade = Depends(get_facade)):
    return await facade.register(payload.full_name, payload.email, payload.password)


@router.post("/login", response_model=SessionOut)
async def login(payload: LoginIn, response: Response, facade: BookingFacade = Depends(get_facade)):
    token, user = await facade.login(payload.name, payload.password)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return SessionOut(token=token, user=user)


@router.post("/logout", status_code=204)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    facade: BookingFacade = Depends(get_facade),
):
    await facade.logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return None


@router.get("/me")
async def me(token: Optional[str] = Depends(get_session_token), facade: BookingFacade = Depends(get_facade)):
    user = await facade.current_user(token)
    if user is None:
        return {"logged_in": False}
    return {"logged_in": True, "user": user}
