"""Read-only projections over the seat ledger.

None of these queries lock anything. Listings may lag a concurrent commit;
``reserved_seats`` reads straight from the ledger.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from busbook.config import settings
from busbook.db.session import async_session, storage_session
from busbook.models.models import Bus, Reservation, Trip
from busbook.schemas.trip import ReservedSeats, TripBooking, TripSummary, UserTrips
from busbook.services.catalog import Catalog
from busbook.services.ledger import SeatLedger


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AvailabilityService:
    def __init__(
        self,
        ledger: Optional[SeatLedger] = None,
        catalog: Optional[Catalog] = None,
        sessions: async_sessionmaker = None,
        clock: Callable[[], datetime] = _utcnow,
        tz: Optional[str] = None,
    ):
        self.ledger = ledger or SeatLedger()
        self.catalog = catalog or Catalog(sessions)
        self.sessions = sessions or async_session
        self.clock = clock
        self.tz = ZoneInfo(tz or settings.TRIP_TIMEZONE)

    async def _reserved_counts(self, trip_ids: Iterable[int]) -> Dict[int, int]:
        ids = list(trip_ids)
        if not ids:
            return {}
        stmt = (
            select(Reservation.trip_id, func.count(Reservation.id))
            .where(Reservation.trip_id.in_(ids))
            .group_by(Reservation.trip_id)
        )
        async with storage_session(self.sessions) as session:
            res = await session.execute(stmt)
            return {trip_id: count for trip_id, count in res.all()}

    @staticmethod
    def _summary(trip: Trip, reserved: int) -> TripSummary:
        total = trip.bus.total_seats
        return TripSummary(
            trip_id=trip.id,
            trip_date=trip.trip_date,
            source=trip.source,
            destination=trip.destination,
            departure_time=trip.departure_time,
            arrival_time=trip.arrival_time,
            trip_price=trip.trip_price,
            tier=trip.tier,
            bus_id=trip.bus_id,
            total_seats=total,
            reserved_seats=reserved,
            available_seats=total - reserved,
        )

    async def list_trips(self, tier: Optional[str] = None) -> List[TripSummary]:
        """All trips (optionally of one tier), earliest date first."""
        trips = await self.catalog.list_trips(tier)
        counts = await self._reserved_counts(t.id for t in trips)
        return [self._summary(t, counts.get(t.id, 0)) for t in trips]

    async def trip_detail(self, trip_id: int) -> TripSummary:
        trip = await self.catalog.get_trip(trip_id)
        counts = await self._reserved_counts([trip.id])
        return self._summary(trip, counts.get(trip.id, 0))

    async def reserved_seats(self, trip_id: int) -> ReservedSeats:
        total_seats = await self.ledger.capacity(trip_id)
        occupied = await self.ledger.occupied_seats(trip_id)
        return ReservedSeats(trip_id=trip_id, occupied=sorted(occupied), total_seats=total_seats)

    async def user_trips(self, user_id: int) -> UserTrips:
        """Trips ``user_id`` holds seats on, split at the current instant.

        A trip departing exactly now still counts as upcoming.
        """
        stmt = (
            select(
                Trip.id,
                Trip.source,
                Trip.destination,
                Trip.trip_date,
                Trip.departure_time,
                Trip.arrival_time,
                Trip.tier,
                Bus.plate_id,
                func.count(Reservation.id).label("seats_booked"),
            )
            .select_from(Reservation)
            .join(Trip, Reservation.trip_id == Trip.id)
            .join(Bus, Trip.bus_id == Bus.id)
            .where(Reservation.user_id == user_id)
            .group_by(
                Trip.id,
                Trip.source,
                Trip.destination,
                Trip.trip_date,
                Trip.departure_time,
                Trip.arrival_time,
                Trip.tier,
                Bus.plate_id,
            )
            .order_by(desc(Trip.trip_date), desc(Trip.departure_time))
        )
        async with storage_session(self.sessions) as session:
            rows = (await session.execute(stmt)).all()

        now = self.clock()
        upcoming, past = [], []
        for row in rows:
            departure = datetime.combine(row.trip_date, row.departure_time, tzinfo=self.tz)
            arrival = None
            if row.arrival_time is not None:
                arrival = datetime.combine(row.trip_date, row.arrival_time, tzinfo=self.tz)
                if arrival < departure:
                    # overnight trip
                    arrival += timedelta(days=1)
            booking = TripBooking(
                trip_id=row.id,
                source=row.source,
                destination=row.destination,
                departure_time=departure,
                arrival_time=arrival,
                tier=row.tier,
                seats_booked=row.seats_booked,
                plate_id=row.plate_id,
            )
            if departure >= now:
                upcoming.append(booking)
            else:
                past.append(booking)
        return UserTrips(upcoming=upcoming, past=past)
