import logging
from typing import Optional

from busbook.errors import BookingError, SeatConflictError, TripFullError
from busbook.metrics import AUTO_ASSIGN_CONFLICTS, BOOKING_ATTEMPTS
from busbook.schemas.booking import BookingResult
from busbook.services.ledger import SeatLedger

logger = logging.getLogger(__name__)


class ReservationEngine:
    """Resolves booking intents against the seat ledger.

    Both booking modes go through ``SeatLedger.try_commit``; the engine
    never decides availability from a cached count.
    """

    def __init__(self, ledger: Optional[SeatLedger] = None):
        self.ledger = ledger or SeatLedger()

    async def book_trip(self, trip_id: int, user_id: int) -> BookingResult:
        """Auto-assign the lowest free seat.

        Candidates come from an occupancy snapshot that may already be
        stale; a conflict just moves on to the next candidate. Occupied
        seats never become free again, so running out of candidates means
        the trip is full. At most ``capacity`` commits are attempted.
        """
        try:
            capacity = await self.ledger.capacity(trip_id)
            occupied = await self.ledger.occupied_seats(trip_id)
            candidates = [n for n in range(1, capacity + 1) if n not in occupied]
            for seat_number in candidates:
                try:
                    reservation_id = await self.ledger.try_commit(trip_id, seat_number, user_id)
                except SeatConflictError:
                    AUTO_ASSIGN_CONFLICTS.inc()
                    logger.debug("Auto-assign lost seat, trying next", extra={"trip_id": trip_id, "seat_number": seat_number})
                    continue
                BOOKING_ATTEMPTS.labels(mode="auto", result="booked").inc()
                return BookingResult(reservation_id=reservation_id, trip_id=trip_id, seat_number=seat_number)
            raise TripFullError()
        except BookingError as exc:
            BOOKING_ATTEMPTS.labels(mode="auto", result=exc.code).inc()
            raise

    async def reserve_trip(self, trip_id: int, user_id: int, seat_number: int, meal: Optional[str] = None) -> BookingResult:
        """Reserve the seat the caller picked. Conflicts are not retried."""
        try:
            reservation_id = await self.ledger.try_commit(trip_id, seat_number, user_id, meal)
        except BookingError as exc:
            BOOKING_ATTEMPTS.labels(mode="explicit", result=exc.code).inc()
            raise
        BOOKING_ATTEMPTS.labels(mode="explicit", result="booked").inc()
        return BookingResult(reservation_id=reservation_id, trip_id=trip_id, seat_number=seat_number)
