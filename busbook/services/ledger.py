"""Seat ledger: the durable, consistency-enforcing record of occupied seats.

The reservations table is the only source of truth for occupancy. There is
no seats-left counter anywhere; availability is always derived from the
committed reservation rows.

``try_commit`` runs the capacity check, the seat check and the insert in a
single write transaction. On PostgreSQL the trip row is locked with
``SELECT ... FOR UPDATE`` so writers for the same trip queue up behind each
other while other trips proceed in parallel. On SQLite the write session
opens with ``BEGIN IMMEDIATE`` (see ``busbook.db.session``). In both cases
the ``(trip_id, seat_number)`` unique constraint is the final arbiter.
"""
import asyncio
import logging
import time
from typing import Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from busbook.config import settings
from busbook.db.session import async_session, ledger_session, storage_session
from busbook.errors import (
    InvalidSeatError,
    LedgerTimeoutError,
    NotFoundError,
    SeatConflictError,
    TripFullError,
)
from busbook.metrics import LEDGER_COMMIT_LATENCY, LEDGER_TIMEOUTS
from busbook.models.models import Bus, Reservation, Trip

logger = logging.getLogger(__name__)


class SeatLedger:
    def __init__(
        self,
        read_sessions: async_sessionmaker = None,
        write_sessions: async_sessionmaker = None,
        timeout: Optional[float] = None,
    ):
        self.read_sessions = read_sessions or async_session
        self.write_sessions = write_sessions or ledger_session
        self.timeout = settings.LEDGER_TIMEOUT_SECONDS if timeout is None else timeout

    async def _bounded(self, coro, trip_id: int):
        # on sqlite the driver's lock wait is capped at the same deadline
        # (busbook.db.session.sqlite_lock_timeout) and may fire first
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            self._timed_out(trip_id)
            raise LedgerTimeoutError() from exc
        except LedgerTimeoutError:
            self._timed_out(trip_id)
            raise

    def _timed_out(self, trip_id: int) -> None:
        LEDGER_TIMEOUTS.inc()
        logger.warning("Seat ledger deadline exceeded", extra={"trip_id": trip_id, "timeout": self.timeout})

    async def capacity(self, trip_id: int) -> int:
        """Total seats of the bus serving ``trip_id``."""
        return await self._bounded(self._capacity(trip_id), trip_id)

    async def _capacity(self, trip_id: int) -> int:
        async with storage_session(self.read_sessions) as session:
            stmt = select(Bus.total_seats).join(Trip, Trip.bus_id == Bus.id).where(Trip.id == trip_id)
            total = await session.scalar(stmt)
        if total is None:
            raise NotFoundError(f"Trip {trip_id} not found")
        return total

    async def occupied_seats(self, trip_id: int) -> Set[int]:
        """Seat numbers held by committed reservations on ``trip_id``."""
        return await self._bounded(self._occupied_seats(trip_id), trip_id)

    async def _occupied_seats(self, trip_id: int) -> Set[int]:
        async with storage_session(self.read_sessions) as session:
            exists = await session.scalar(select(Trip.id).where(Trip.id == trip_id))
            if exists is None:
                raise NotFoundError(f"Trip {trip_id} not found")
            res = await session.scalars(select(Reservation.seat_number).where(Reservation.trip_id == trip_id))
            return set(res.all())

    async def try_commit(self, trip_id: int, seat_number: int, user_id: int, meal: Optional[str] = None) -> int:
        """Atomically reserve ``seat_number`` on ``trip_id`` for ``user_id``.

        Returns the new reservation id. Raises TripFullError when every seat
        is taken, SeatConflictError when this seat is, InvalidSeatError for a
        seat outside ``1..total_seats`` and NotFoundError for an unknown trip.
        Nothing is written unless the whole reservation is.
        """
        start = time.perf_counter()
        reservation_id = await self._bounded(self._commit(trip_id, seat_number, user_id, meal), trip_id)
        LEDGER_COMMIT_LATENCY.observe(time.perf_counter() - start)
        logger.info(
            "Seat committed",
            extra={"trip_id": trip_id, "seat_number": seat_number, "user_id": user_id, "reservation_id": reservation_id},
        )
        return reservation_id

    async def _commit(self, trip_id: int, seat_number: int, user_id: int, meal: Optional[str]) -> int:
        async with storage_session(self.write_sessions) as session:
            async with session.begin():
                # lock the trip row; every writer for this trip serializes here
                stmt = (
                    select(Trip.id, Bus.total_seats)
                    .join(Bus, Trip.bus_id == Bus.id)
                    .where(Trip.id == trip_id)
                    .with_for_update(of=Trip)
                )
                row = (await session.execute(stmt)).first()
                if row is None:
                    raise NotFoundError(f"Trip {trip_id} not found")
                total_seats = row.total_seats
                if not 1 <= seat_number <= total_seats:
                    raise InvalidSeatError(f"Seat {seat_number} is outside 1..{total_seats}")

                res = await session.scalars(select(Reservation.seat_number).where(Reservation.trip_id == trip_id))
                taken = set(res.all())
                if len(taken) >= total_seats:
                    raise TripFullError()
                if seat_number in taken:
                    logger.debug("Seat already taken", extra={"trip_id": trip_id, "seat_number": seat_number})
                    raise SeatConflictError(f"Seat {seat_number} already reserved")

                reservation = Reservation(trip_id=trip_id, user_id=user_id, seat_number=seat_number, meal=meal)
                session.add(reservation)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    # violation of unique constraint (trip+seat) => already booked
                    raise SeatConflictError(f"Seat {seat_number} already reserved") from exc
            return reservation.id
