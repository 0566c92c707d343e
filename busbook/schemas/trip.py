from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class TripSummary(BaseModel):
    trip_id: int
    trip_date: date
    source: str
    destination: str
    departure_time: time
    arrival_time: Optional[time] = None
    trip_price: Decimal
    tier: str
    bus_id: int
    total_seats: int
    reserved_seats: int
    available_seats: int


class ReservedSeats(BaseModel):
    trip_id: int
    occupied: List[int]
    total_seats: int


class TripBooking(BaseModel):
    trip_id: int
    source: str
    destination: str
    departure_time: datetime
    arrival_time: Optional[datetime] = None
    tier: str
    seats_booked: int
    plate_id: str


class UserTrips(BaseModel):
    upcoming: List[TripBooking]
    past: List[TripBooking]
