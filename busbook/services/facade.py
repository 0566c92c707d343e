"""Request/response adapter in front of the booking core.

The facade holds no booking logic. It turns a session token into a user id
and hands the call to the reservation engine, the availability service or
the identity provider.
"""
from typing import List, Optional, Tuple

from busbook.errors import UnauthenticatedError
from busbook.schemas.auth import UserOut
from busbook.schemas.booking import BookingResult
from busbook.schemas.trip import ReservedSeats, TripSummary, UserTrips
from busbook.services.auth import IdentityProvider
from busbook.services.availability import AvailabilityService
from busbook.services.ledger import SeatLedger
from busbook.services.reservation import ReservationEngine
from busbook.services.sessions import SessionStore


class BookingFacade:
    def __init__(
        self,
        engine: ReservationEngine,
        availability: AvailabilityService,
        sessions: SessionStore,
        identity: IdentityProvider,
    ):
        self.engine = engine
        self.availability = availability
        self.sessions = sessions
        self.identity = identity

    @classmethod
    def default(cls) -> "BookingFacade":
        ledger = SeatLedger()
        return cls(
            engine=ReservationEngine(ledger),
            availability=AvailabilityService(ledger),
            sessions=SessionStore(),
            identity=IdentityProvider(),
        )

    async def _require_user(self, token: Optional[str]) -> int:
        user_id = await self.sessions.resolve(token)
        if user_id is None:
            raise UnauthenticatedError()
        return user_id

    # write path

    async def book_trip(self, token: Optional[str], trip_id: int) -> BookingResult:
        user_id = await self._require_user(token)
        return await self.engine.book_trip(trip_id, user_id)

    async def reserve_trip(
        self, token: Optional[str], trip_id: int, seat_number: int, meal: Optional[str] = None
    ) -> BookingResult:
        user_id = await self._require_user(token)
        return await self.engine.reserve_trip(trip_id, user_id, seat_number, meal)

    # read path

    async def list_trips(self, tier: Optional[str] = None) -> List[TripSummary]:
        return await self.availability.list_trips(tier)

    async def trip_detail(self, trip_id: int) -> TripSummary:
        return await self.availability.trip_detail(trip_id)

    async def reserved_seats(self, trip_id: int) -> ReservedSeats:
        return await self.availability.reserved_seats(trip_id)

    async def user_trips(self, token: Optional[str]) -> UserTrips:
        user_id = await self._require_user(token)
        return await self.availability.user_trips(user_id)

    # accounts and sessions

    async def register(self, full_name: str, email: str, password: str) -> UserOut:
        user_id = await self.identity.register(full_name, email, password)
        return await self._user_out(user_id)

    async def login(self, name: str, password: str) -> Tuple[str, UserOut]:
        user_id = await self.identity.authenticate(name, password)
        token = await self.sessions.create(user_id)
        return token, await self._user_out(user_id)

    async def logout(self, token: Optional[str]) -> None:
        await self.sessions.destroy(token)

    async def current_user(self, token: Optional[str]) -> Optional[UserOut]:
        user_id = await self.sessions.resolve(token)
        if user_id is None:
            return None
        return await self._user_out(user_id)

    async def _user_out(self, user_id: int) -> UserOut:
        user = await self.identity.get_user(user_id)
        return UserOut(id=user.id, full_name=user.full_name, email=user.email)
