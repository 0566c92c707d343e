from typing import Optional

from fastapi import APIRouter, Depends

from busbook.auth.deps import get_facade, get_session_token
from busbook.schemas.booking import BookingResult, BookTripRequest, ReserveTripRequest
from busbook.schemas.trip import UserTrips
from busbook.services.facade import BookingFacade

router = APIRouter(tags=["bookings"])


@router.post("/auto", response_model=BookingResult)
async def book_trip(
    req: BookTripRequest,
    token: Optional[str] = Depends(get_session_token),
    facade: BookingFacade = Depends(get_facade),
):
    """Book the lowest free seat on the trip."""
    return await facade.book_trip(token, req.trip_id)


@router.post("/", response_model=BookingResult)
async def reserve_trip(
    req: ReserveTripRequest,
    token: Optional[str] = Depends(get_session_token),
    facade: BookingFacade = Depends(get_facade),
):
    """Reserve the seat picked from the seat map. A taken seat is a 409, never a substitute."""
    return await facade.reserve_trip(token, req.trip_id, req.seat_number, req.meal)


@router.get("/mine", response_model=UserTrips)
async def user_trips(token: Optional[str] = Depends(get_session_token), facade: BookingFacade = Depends(get_facade)):
    return await facade.user_trips(token)
