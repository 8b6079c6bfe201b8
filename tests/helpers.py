"""
Shared fixtures for database-backed tests: an in-memory SQLite database
per test case plus small factories for the models.
"""

import unittest
from datetime import date, datetime, time, timezone
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hostel_booking.models import (
    Base,
    Booking,
    BookingStatus,
    Payment,
    PaymentStatus,
    PaymentType,
    Room,
    RoomStatus,
    ShuttleRoute,
    ShuttleRouteStatus,
    User,
    UserRole,
)

TODAY = date(2024, 1, 1)
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def fixed_today() -> date:
    return TODAY


def fixed_clock() -> datetime:
    return NOW


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema in a private in-memory database for every test."""

    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def create_user(self, email="student@example.com", role=UserRole.STUDENT) -> User:
        user = User(email=email, first_name="Ama", last_name="Mensah", role=role)
        self.db.add(user)
        self.db.commit()
        return user

    def create_room(
        self,
        room_number="A101",
        price=Decimal("500.00"),
        status=RoomStatus.AVAILABLE,
        capacity=2,
        is_deleted=False,
    ) -> Room:
        room = Room(
            room_number=room_number,
            room_type="double",
            capacity=capacity,
            current_occupancy=0,
            price_per_month=price,
            status=status,
            amenities=["wifi", "desk"],
            is_deleted=is_deleted,
        )
        self.db.add(room)
        self.db.commit()
        return room

    def create_booking(
        self,
        user,
        room,
        check_in=date(2024, 2, 1),
        check_out=date(2024, 5, 1),
        total=Decimal("1500.00"),
        status=BookingStatus.PENDING,
        amount_paid=Decimal("0"),
    ) -> Booking:
        booking = Booking(
            user_id=user.id,
            room_id=room.id,
            check_in_date=check_in,
            check_out_date=check_out,
            duration_months=3,
            total_amount=total,
            amount_paid=amount_paid,
            outstanding_balance=max(Decimal("0"), total - amount_paid),
            status=status,
        )
        self.db.add(booking)
        self.db.commit()
        return booking

    def create_route(
        self,
        total_seats=20,
        price=Decimal("15.00"),
        status=ShuttleRouteStatus.ACTIVE,
        route_from="Main Campus",
        route_to="City Centre",
    ) -> ShuttleRoute:
        route = ShuttleRoute(
            route_from=route_from,
            route_to=route_to,
            departure_time=time(7, 30),
            arrival_time=time(8, 15),
            price_per_seat=price,
            total_seats=total_seats,
            status=status,
        )
        self.db.add(route)
        self.db.commit()
        return route

    def create_payment(
        self,
        user,
        reference,
        amount=Decimal("1500.00"),
        booking=None,
        status=PaymentStatus.PENDING,
        payment_type=PaymentType.ROOM_BOOKING,
    ) -> Payment:
        payment = Payment(
            user_id=user.id,
            booking_id=booking.id if booking is not None else None,
            amount=amount,
            currency="GHS",
            payment_type=payment_type,
            reference_id=str(booking.id) if booking is not None else None,
            transaction_reference=reference,
            status=status,
        )
        self.db.add(payment)
        self.db.commit()
        return payment

    def reload(self, entity):
        self.db.refresh(entity)
        return entity
