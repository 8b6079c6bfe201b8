from datetime import date
from decimal import Decimal
from uuid import uuid4

from hostel_booking.core.exceptions import ConflictError, ResourceNotFoundError
from hostel_booking.models import (
    BookingStatus,
    PaymentStatus,
    Room,
    ShuttleBooking,
    ShuttleBookingStatus,
)
from hostel_booking.repositories import (
    BookingRepository,
    PaymentRepository,
    RoomRepository,
    ShuttleBookingRepository,
)
from tests.helpers import NOW, DatabaseTestCase


class TestBookingRepository(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.create_user()
        self.room = self.create_room()
        self.repo = BookingRepository(self.db)

    def test_find_conflicting_uses_closed_intervals(self):
        existing = self.create_booking(self.user, self.room, check_in=date(2024, 2, 1), check_out=date(2024, 3, 1))

        self.assertEqual(
            self.repo.find_conflicting(self.room.id, date(2024, 3, 1), date(2024, 4, 1)).id,
            existing.id,
        )
        self.assertEqual(
            self.repo.find_conflicting(self.room.id, date(2024, 1, 1), date(2024, 2, 1)).id,
            existing.id,
        )
        self.assertIsNone(self.repo.find_conflicting(self.room.id, date(2024, 3, 2), date(2024, 4, 1)))

    def test_find_conflicting_skips_released_bookings(self):
        self.create_booking(self.user, self.room, status=BookingStatus.CANCELLED)
        self.create_booking(self.user, self.room, status=BookingStatus.REJECTED)

        self.assertIsNone(self.repo.find_conflicting(self.room.id, date(2024, 2, 1), date(2024, 5, 1)))

    def test_balance_totals_counts_approved_and_active_only(self):
        self.create_booking(self.user, self.room, total=Decimal("1000.00"), status=BookingStatus.APPROVED)
        self.create_booking(
            self.user, self.room,
            total=Decimal("600.00"), amount_paid=Decimal("200.00"), status=BookingStatus.ACTIVE,
        )
        self.create_booking(self.user, self.room, total=Decimal("999.00"), status=BookingStatus.PENDING)
        self.create_booking(self.user, self.room, total=Decimal("999.00"), status=BookingStatus.CANCELLED)

        totals = self.repo.balance_totals(self.user.id)

        self.assertEqual(totals["total_amount"], Decimal("1600.00"))
        self.assertEqual(totals["amount_paid"], Decimal("200.00"))
        self.assertEqual(totals["outstanding_balance"], Decimal("1400.00"))

    def test_paginate_reports_full_total(self):
        for _ in range(5):
            self.create_booking(self.user, self.room)

        items, total = self.repo.list_for_user(self.user.id, page=2, limit=2)

        self.assertEqual(total, 5)
        self.assertEqual(len(items), 2)

        items, total = self.repo.list_for_user(self.user.id, page=3, limit=2)
        self.assertEqual(len(items), 1)

    def test_get_by_id_missing(self):
        with self.assertRaises(ResourceNotFoundError):
            self.repo.get_by_id(uuid4())


class TestRoomRepository(DatabaseTestCase):

    def test_search_filters_and_sorts(self):
        self.create_room(room_number="A101", price=Decimal("700.00"))
        self.create_room(room_number="A102", price=Decimal("300.00"))
        self.create_room(room_number="B201", price=Decimal("500.00"))
        self.create_room(room_number="A103", price=Decimal("100.00"), is_deleted=True)
        repo = RoomRepository(self.db)

        items, total = repo.search(search="A1", sort="price_asc")
        self.assertEqual(total, 2)
        self.assertEqual([r.room_number for r in items], ["A102", "A101"])

        items, total = repo.search(min_price=Decimal("400"), max_price=Decimal("600"))
        self.assertEqual([r.room_number for r in items], ["B201"])

    def test_duplicate_room_number_conflicts(self):
        self.create_room(room_number="A101")
        repo = RoomRepository(self.db)
        duplicate = Room(
            room_number="A101",
            room_type="single",
            capacity=1,
            current_occupancy=0,
            price_per_month=Decimal("100.00"),
        )

        with self.assertRaises(ConflictError):
            repo.add(duplicate)
        self.db.rollback()


class TestPaymentRepository(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.create_user()
        self.repo = PaymentRepository(self.db)

    def test_completion_transition_wins_once(self):
        self.create_payment(self.user, "PAY_1_CASAAAA")

        self.assertTrue(self.repo.mark_completed_if_pending("PAY_1_CASAAAA", NOW))
        self.assertFalse(self.repo.mark_completed_if_pending("PAY_1_CASAAAA", NOW))
        self.assertFalse(self.repo.mark_failed_if_pending("PAY_1_CASAAAA", "late", NOW))
        self.db.commit()

        payment = self.repo.find_by_transaction_reference("PAY_1_CASAAAA")
        self.assertEqual(payment.status, PaymentStatus.COMPLETED)
        self.assertIsNone(payment.failure_reason)

    def test_unknown_reference_never_transitions(self):
        self.assertFalse(self.repo.mark_completed_if_pending("PAY_MISSING", NOW))
        self.assertIsNone(self.repo.find_by_transaction_reference("PAY_MISSING"))

    def test_failure_reason_is_recorded(self):
        self.create_payment(self.user, "PAY_1_FAILAAA")

        self.assertTrue(self.repo.mark_failed_if_pending("PAY_1_FAILAAA", "Declined", NOW))
        self.db.commit()

        payment = self.repo.find_by_transaction_reference("PAY_1_FAILAAA")
        self.assertEqual(payment.status, PaymentStatus.FAILED)
        self.assertEqual(payment.failure_reason, "Declined")


class TestShuttleBookingRepository(DatabaseTestCase):

    def test_booked_seats_ignores_cancelled_and_other_dates(self):
        user = self.create_user()
        route = self.create_route()
        trip = date(2024, 1, 10)
        rows = [
            (trip, 3, ShuttleBookingStatus.CONFIRMED),
            (trip, 4, ShuttleBookingStatus.CONFIRMED),
            (trip, 5, ShuttleBookingStatus.CANCELLED),
            (date(2024, 1, 11), 6, ShuttleBookingStatus.CONFIRMED),
        ]
        for booking_date, seats, status in rows:
            self.db.add(ShuttleBooking(
                user_id=user.id,
                route_id=route.id,
                booking_date=booking_date,
                seats_booked=seats,
                total_price=Decimal("15.00") * seats,
                status=status,
            ))
        self.db.commit()

        repo = ShuttleBookingRepository(self.db)
        self.assertEqual(repo.booked_seats(route.id, trip), 7)
        self.assertEqual(repo.booked_seats(route.id, date(2024, 1, 12)), 0)
