from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import async_sessionmaker

from busbook.db.session import async_session, storage_session
from busbook.errors import NotFoundError
from busbook.models.models import Bus, Trip


class Catalog:
    """Read-only access to published trips and buses."""

    def __init__(self, sessions: async_sessionmaker = None):
        self.sessions = sessions or async_session

    async def get_trip(self, trip_id: int) -> Trip:
        async with storage_session(self.sessions) as session:
            trip = await session.get(Trip, trip_id, options=[selectinload(Trip.bus)])
        if trip is None:
            raise NotFoundError(f"Trip {trip_id} not found")
        return trip

    async def list_trips(self, tier: Optional[str] = None) -> List[Trip]:
        stmt = select(Trip).options(selectinload(Trip.bus)).order_by(Trip.trip_date, Trip.departure_time, Trip.id)
        if tier:
            stmt = stmt.where(Trip.tier == tier)
        async with storage_session(self.sessions) as session:
            res = await session.scalars(stmt)
            return list(res.all())

    async def get_bus(self, bus_id: int) -> Bus:
        async with storage_session(self.sessions) as session:
            bus = await session.get(Bus, bus_id)
        if bus is None:
            raise NotFoundError(f"Bus {bus_id} not found")
        return bus
