from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from busbook.db.base import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    full_name = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Bus(Base):
    __tablename__ = "buses"
    id = Column(Integer, primary_key=True)
    plate_id = Column(String(64), nullable=False, unique=True, index=True)
    total_seats = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    trips = relationship("Trip", back_populates="bus")

    __table_args__ = (CheckConstraint("total_seats > 0", name="ck_bus_total_seats_positive"),)


class Trip(Base):
    __tablename__ = "trips"
    id = Column(Integer, primary_key=True)
    source = Column(String(128), nullable=False, index=True)
    destination = Column(String(128), nullable=False, index=True)
    trip_date = Column(Date, nullable=False, index=True)
    departure_time = Column(Time, nullable=False)
    arrival_time = Column(Time, nullable=True)
    trip_price = Column(Numeric(10, 2), nullable=False, default=0)
    # service class (economy, premium, ...), filtering only
    tier = Column(String(50), nullable=False, default="economy", index=True)
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    bus = relationship("Bus", back_populates="trips")


class Reservation(Base):
    """One occupied seat. Rows are never updated once committed."""

    __tablename__ = "reservations"
    id = Column(Integer, primary_key=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_number = Column(Integer, nullable=False)
    meal = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("trip_id", "seat_number", name="uq_reservation_trip_seat"),
        CheckConstraint("seat_number >= 1", name="ck_reservation_seat_number_positive"),
    )
