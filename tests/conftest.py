"""Shared fixtures: a throwaway sqlite database per test plus seeding helpers."""

from datetime import date, time, timedelta
from decimal import Decimal
import itertools

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis

import busbook.models  # noqa: F401
from busbook.db.base import Base
from busbook.db.session import make_engine, make_session_factory
from busbook.models.models import Bus, Trip, User
from busbook.services.auth import IdentityProvider
from busbook.services.availability import AvailabilityService
from busbook.services.facade import BookingFacade
from busbook.services.ledger import SeatLedger
from busbook.services.reservation import ReservationEngine
from busbook.services.sessions import SessionStore


_plates = itertools.count(1)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'busbook.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessions(engine):
    return make_session_factory(engine)


@pytest.fixture
def ledger(engine, sessions):
    return SeatLedger(sessions, make_session_factory(engine, exclusive=True), timeout=10)


@pytest.fixture
def reservation_engine(ledger):
    return ReservationEngine(ledger)


@pytest.fixture
def availability(ledger, sessions):
    return AvailabilityService(ledger, sessions=sessions)


@pytest_asyncio.fixture
async def redis():
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def session_store(redis):
    return SessionStore(redis=redis)


@pytest.fixture
def facade(reservation_engine, availability, session_store, sessions):
    return BookingFacade(
        engine=reservation_engine,
        availability=availability,
        sessions=session_store,
        identity=IdentityProvider(sessions),
    )


class Seeder:
    """Writes catalog rows directly; the catalog itself is read-only."""

    def __init__(self, sessions):
        self.sessions = sessions

    async def _add(self, obj):
        async with self.sessions() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def bus(self, total_seats: int = 40, plate_id: str = None) -> Bus:
        return await self._add(Bus(plate_id=plate_id or f"UAX-{next(_plates):03d}", total_seats=total_seats))

    async def trip(
        self,
        bus: Bus,
        trip_date: date = None,
        departure_time: time = time(8, 0),
        arrival_time: time = time(12, 30),
        tier: str = "economy",
        source: str = "Cairo",
        destination: str = "Alexandria",
        trip_price: Decimal = Decimal("150.00"),
    ) -> Trip:
        return await self._add(
            Trip(
                source=source,
                destination=destination,
                trip_date=trip_date or date.today() + timedelta(days=7),
                departure_time=departure_time,
                arrival_time=arrival_time,
                trip_price=trip_price,
                tier=tier,
                bus_id=bus.id,
            )
        )

    async def user(self, full_name: str) -> User:
        return await self._add(
            User(full_name=full_name, email=f"{full_name.lower()}@example.com", hashed_password="x")
        )


@pytest.fixture
def seed(sessions):
    return Seeder(sessions)
