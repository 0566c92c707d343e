from typing import Optional

from pydantic import BaseModel, Field


class BookTripRequest(BaseModel):
    trip_id: int


class ReserveTripRequest(BaseModel):
    trip_id: int
    seat_number: int = Field(..., ge=1, description="Seat picked from the seat map")
    meal: Optional[str] = Field(None, max_length=64)


class BookingResult(BaseModel):
    reservation_id: int
    trip_id: int
    seat_number: int
