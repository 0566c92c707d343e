"""
Unit tests for ReservationEngine against an in-memory ledger double.

Covers seat selection order, the bounded retry on conflicts and the
no-retry rule for explicitly chosen seats.
"""

from unittest.mock import AsyncMock

import pytest

from busbook.errors import LedgerTimeoutError, NotFoundError, SeatConflictError, StorageFailureError, TripFullError
from busbook.services.reservation import ReservationEngine


class InMemoryLedger:
    """Ledger double. ``stale`` seats are hidden from occupied_seats to mimic
    a snapshot taken before a concurrent commit landed."""

    def __init__(self, capacity, occupied=(), stale=()):
        self.total = capacity
        self.seats = set(occupied) | set(stale)
        self.stale = set(stale)
        self.commits = []
        self._next_id = 1

    async def capacity(self, trip_id):
        return self.total

    async def occupied_seats(self, trip_id):
        return self.seats - self.stale

    async def try_commit(self, trip_id, seat_number, user_id, meal=None):
        self.commits.append(seat_number)
        if len(self.seats) >= self.total:
            raise TripFullError()
        if seat_number in self.seats:
            raise SeatConflictError()
        self.seats.add(seat_number)
        rid, self._next_id = self._next_id, self._next_id + 1
        return rid


@pytest.mark.unit
class TestBookTrip:
    @pytest.mark.asyncio
    async def test_assigns_lowest_free_seat(self):
        ledger = InMemoryLedger(capacity=4, occupied={1, 3})
        result = await ReservationEngine(ledger).book_trip(trip_id=7, user_id=1)
        assert result.seat_number == 2
        assert result.trip_id == 7
        assert ledger.commits == [2]

    @pytest.mark.asyncio
    async def test_sequential_scenario_fills_then_reports_full(self):
        ledger = InMemoryLedger(capacity=2)
        engine = ReservationEngine(ledger)
        assert (await engine.book_trip(1, user_id=10)).seat_number == 1
        assert (await engine.book_trip(1, user_id=11)).seat_number == 2
        with pytest.raises(TripFullError):
            await engine.book_trip(1, user_id=12)

    @pytest.mark.asyncio
    async def test_conflict_moves_to_next_candidate(self):
        # seats 1 and 2 were taken after the snapshot was read
        ledger = InMemoryLedger(capacity=5, stale={1, 2})
        result = await ReservationEngine(ledger).book_trip(1, user_id=1)
        assert result.seat_number == 3
        assert ledger.commits == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_attempts_are_bounded_by_capacity(self):
        ledger = InMemoryLedger(capacity=3)
        ledger.try_commit = AsyncMock(side_effect=SeatConflictError())
        with pytest.raises(TripFullError):
            await ReservationEngine(ledger).book_trip(1, user_id=1)
        assert ledger.try_commit.await_count == 3

    @pytest.mark.asyncio
    async def test_full_from_ledger_stops_immediately(self):
        ledger = InMemoryLedger(capacity=3, stale={1, 2, 3})
        with pytest.raises(TripFullError):
            await ReservationEngine(ledger).book_trip(1, user_id=1)
        assert ledger.commits == [1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [NotFoundError, LedgerTimeoutError, StorageFailureError])
    async def test_other_errors_propagate_unchanged(self, error):
        ledger = InMemoryLedger(capacity=3)
        ledger.try_commit = AsyncMock(side_effect=error())
        with pytest.raises(error):
            await ReservationEngine(ledger).book_trip(1, user_id=1)
        assert ledger.try_commit.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_trip_is_not_found(self):
        ledger = InMemoryLedger(capacity=3)
        ledger.capacity = AsyncMock(side_effect=NotFoundError())
        with pytest.raises(NotFoundError):
            await ReservationEngine(ledger).book_trip(99, user_id=1)


@pytest.mark.unit
class TestReserveTrip:
    @pytest.mark.asyncio
    async def test_reserves_requested_seat_with_meal(self):
        ledger = InMemoryLedger(capacity=4)
        ledger.try_commit = AsyncMock(return_value=42)
        result = await ReservationEngine(ledger).reserve_trip(3, user_id=5, seat_number=4, meal="vegetarian")
        assert result.reservation_id == 42
        assert result.seat_number == 4
        ledger.try_commit.assert_awaited_once_with(3, 4, 5, "vegetarian")

    @pytest.mark.asyncio
    async def test_conflict_is_not_retried(self):
        ledger = InMemoryLedger(capacity=4, occupied={2})
        with pytest.raises(SeatConflictError):
            await ReservationEngine(ledger).reserve_trip(1, user_id=1, seat_number=2)
        assert ledger.commits == [2]

    @pytest.mark.asyncio
    async def test_full_is_surfaced(self):
        ledger = InMemoryLedger(capacity=2, occupied={1, 2})
        with pytest.raises(TripFullError):
            await ReservationEngine(ledger).reserve_trip(1, user_id=1, seat_number=1)
