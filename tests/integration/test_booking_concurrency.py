"""
Race tests: many booking tasks against one trip at the same time.

Every task opens its own connections, so the sqlite write lock is what
serializes them, the same role the trip row lock plays on PostgreSQL.
"""

import asyncio
from collections import Counter

import pytest

from busbook.errors import SeatConflictError, TripFullError


pytestmark = pytest.mark.integration


async def _users(seed, n):
    return [await seed.user(f"Rider{i}") for i in range(n)]


@pytest.mark.asyncio
async def test_more_requests_than_seats(reservation_engine, ledger, seed):
    capacity, requests = 4, 10
    trip = await seed.trip(await seed.bus(total_seats=capacity))
    users = await _users(seed, requests)

    results = await asyncio.gather(
        *(reservation_engine.book_trip(trip.id, u.id) for u in users), return_exceptions=True
    )

    booked = [r for r in results if not isinstance(r, Exception)]
    full = [r for r in results if isinstance(r, TripFullError)]
    assert len(booked) == capacity
    assert len(full) == requests - capacity
    seats = [r.seat_number for r in booked]
    assert sorted(seats) == list(range(1, capacity + 1))
    assert await ledger.occupied_seats(trip.id) == set(seats)


@pytest.mark.asyncio
async def test_same_seat_twice_has_one_winner(reservation_engine, ledger, seed):
    trip = await seed.trip(await seed.bus(total_seats=10))
    alice, bob = await _users(seed, 2)

    results = await asyncio.gather(
        reservation_engine.reserve_trip(trip.id, alice.id, 7),
        reservation_engine.reserve_trip(trip.id, bob.id, 7),
        return_exceptions=True,
    )

    kinds = Counter(type(r).__name__ for r in results)
    assert kinds == {"BookingResult": 1, "SeatConflictError": 1}
    assert any(isinstance(r, SeatConflictError) for r in results)
    assert await ledger.occupied_seats(trip.id) == {7}


@pytest.mark.asyncio
async def test_mixed_modes_never_overbook(reservation_engine, ledger, seed):
    capacity = 3
    trip = await seed.trip(await seed.bus(total_seats=capacity))
    users = await _users(seed, 8)

    calls = []
    for i, user in enumerate(users):
        if i % 2:
            calls.append(reservation_engine.reserve_trip(trip.id, user.id, (i % capacity) + 1))
        else:
            calls.append(reservation_engine.book_trip(trip.id, user.id))
    results = await asyncio.gather(*calls, return_exceptions=True)

    booked = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert all(isinstance(f, (TripFullError, SeatConflictError)) for f in failures)
    seats = [r.seat_number for r in booked]
    assert len(seats) == len(set(seats))
    assert len(seats) <= capacity
    assert await ledger.occupied_seats(trip.id) == set(seats)
