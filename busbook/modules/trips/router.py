from typing import List, Optional

from fastapi import APIRouter, Depends

from busbook.auth.deps import get_facade
from busbook.schemas.trip import ReservedSeats, TripSummary
from busbook.services.facade import BookingFacade

router = APIRouter(tags=["trips"])


@router.get("/", response_model=List[TripSummary])
async def list_trips(tier: Optional[str] = None, facade: BookingFacade = Depends(get_facade)):
    return await facade.list_trips(tier)


@router.get("/{trip_id}", response_model=TripSummary)
async def trip_detail(trip_id: int, facade: BookingFacade = Depends(get_facade)):
    return await facade.trip_detail(trip_id)


@router.get("/{trip_id}/reserved-seats", response_model=ReservedSeats)
async def reserved_seats(trip_id: int, facade: BookingFacade = Depends(get_facade)):
    return await facade.reserved_seats(trip_id)
