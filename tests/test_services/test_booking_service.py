from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

from hostel_booking.core.exceptions import (
    AuthorizationError,
    BookingConflictError,
    ConflictError,
    ErrorCode,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_booking.models import BookingStatus, RoomStatus, UserRole
from hostel_booking.services.booking_service import RoomBookingService
from tests.helpers import DatabaseTestCase, fixed_today


class TestCreateBooking(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.create_user()
        self.room = self.create_room(price=Decimal("500.00"))
        self.notifier = MagicMock()
        self.service = RoomBookingService(self.db, notifier=self.notifier, today=fixed_today)

    def test_prices_whole_months_and_starts_pending(self):
        booking = self.service.create_booking(
            self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1)
        )

        self.assertEqual(booking.duration_months, 3)
        self.assertEqual(booking.total_amount, Decimal("1500.00"))
        self.assertEqual(booking.outstanding_balance, Decimal("1500.00"))
        self.assertEqual(booking.amount_paid, Decimal("0"))
        self.assertEqual(booking.status, BookingStatus.PENDING)

    def test_duration_uses_calendar_months(self):
        booking = self.service.create_booking(
            self.user.id, self.room.id, date(2024, 1, 15), date(2024, 3, 15)
        )
        self.assertEqual(booking.duration_months, 2)
        self.assertEqual(booking.total_amount, Decimal("1000.00"))

    def test_sends_confirmation_to_booker(self):
        booking = self.service.create_booking(
            self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1)
        )
        self.notifier.send_booking_confirmation.assert_called_once_with(self.user.email, booking)

    def test_overlap_with_pending_booking_conflicts(self):
        self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))
        other = self.create_user(email="other@example.com")

        with self.assertRaises(BookingConflictError) as ctx:
            self.service.create_booking(other.id, self.room.id, date(2024, 3, 1), date(2024, 6, 1))

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.message, "Room is already booked for the selected dates")

    def test_touching_dates_conflict(self):
        self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 3, 1))

        with self.assertRaises(BookingConflictError):
            self.service.create_booking(self.user.id, self.room.id, date(2024, 3, 1), date(2024, 4, 1))

    def test_disjoint_dates_are_accepted(self):
        self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 3, 1))
        second = self.service.create_booking(self.user.id, self.room.id, date(2024, 3, 2), date(2024, 4, 1))
        self.assertEqual(second.status, BookingStatus.PENDING)

    def test_released_bookings_do_not_block(self):
        for status in (BookingStatus.CANCELLED, BookingStatus.REJECTED, BookingStatus.COMPLETED):
            self.create_booking(self.user, self.room, status=status)

        booking = self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))
        self.assertEqual(booking.status, BookingStatus.PENDING)

    def test_other_rooms_do_not_block(self):
        other_room = self.create_room(room_number="B202")
        self.create_booking(self.user, other_room)

        booking = self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))
        self.assertEqual(booking.room_id, self.room.id)

    def test_check_in_in_the_past_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_booking(self.user.id, self.room.id, date(2023, 12, 31), date(2024, 2, 1))
        self.assertEqual(ctx.exception.error_code, ErrorCode.INVALID_DATE_RANGE)

    def test_check_in_today_allowed(self):
        booking = self.service.create_booking(self.user.id, self.room.id, date(2024, 1, 1), date(2024, 2, 1))
        self.assertEqual(booking.duration_months, 1)

    def test_check_out_must_follow_check_in(self):
        with self.assertRaises(ValidationError):
            self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 2, 1))

    def test_unavailable_room_rejected(self):
        room = self.create_room(room_number="M1", status=RoomStatus.MAINTENANCE)

        with self.assertRaises(ConflictError) as ctx:
            self.service.create_booking(self.user.id, room.id, date(2024, 2, 1), date(2024, 3, 1))
        self.assertEqual(ctx.exception.message, "Room is not available")

    def test_deleted_room_not_found(self):
        room = self.create_room(room_number="D1", is_deleted=True)

        with self.assertRaises(ResourceNotFoundError):
            self.service.create_booking(self.user.id, room.id, date(2024, 2, 1), date(2024, 3, 1))

    def test_failed_request_leaves_no_booking(self):
        self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))
        with self.assertRaises(BookingConflictError):
            self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))

        _, total = self.service.list_bookings(self.user.id)
        self.assertEqual(total, 1)

    def test_room_row_locked_before_overlap_check(self):
        calls = MagicMock()
        calls.attach_mock(MagicMock(wraps=self.service.rooms.get_by_id), "lock_room")
        calls.attach_mock(MagicMock(wraps=self.service.bookings.find_conflicting), "find_conflicting")
        calls.attach_mock(MagicMock(wraps=self.service._commit), "commit")

        with patch.object(self.service.rooms, "get_by_id", calls.lock_room), \
                patch.object(self.service.bookings, "find_conflicting", calls.find_conflicting), \
                patch.object(self.service, "_commit", calls.commit):
            self.service.create_booking(self.user.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))

        calls.lock_room.assert_called_once_with(self.room.id, for_update=True)
        self.assertEqual(
            [name for name, _, _ in calls.mock_calls][:3],
            ["lock_room", "find_conflicting", "commit"],
        )


class TestCancelBooking(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.owner = self.create_user()
        self.other = self.create_user(email="other@example.com")
        self.admin = self.create_user(email="admin@example.com", role=UserRole.ADMIN)
        self.room = self.create_room()
        self.service = RoomBookingService(self.db, today=fixed_today)

    def test_owner_cancels_and_refund_is_amount_paid(self):
        booking = self.create_booking(self.owner, self.room, amount_paid=Decimal("400.00"))

        result = self.service.cancel_booking(booking.id, self.owner.id, UserRole.STUDENT)

        self.assertEqual(result["refund_amount"], Decimal("400.00"))
        self.assertEqual(result["refund_date"], date(2024, 1, 1))
        self.assertEqual(self.reload(booking).status, BookingStatus.CANCELLED)

    def test_admin_may_cancel_any_booking(self):
        booking = self.create_booking(self.owner, self.room)
        self.service.cancel_booking(booking.id, self.admin.id, "super_admin")
        self.assertEqual(self.reload(booking).status, BookingStatus.CANCELLED)

    def test_other_student_forbidden(self):
        booking = self.create_booking(self.owner, self.room)

        with self.assertRaises(AuthorizationError):
            self.service.cancel_booking(booking.id, self.other.id, "student")
        self.assertEqual(self.reload(booking).status, BookingStatus.PENDING)

    def test_finished_bookings_cannot_be_cancelled(self):
        for status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.REJECTED):
            booking = self.create_booking(self.owner, self.room, status=status)
            with self.assertRaises(ValidationError):
                self.service.cancel_booking(booking.id, self.owner.id, "student")

    def test_cancelled_dates_become_bookable(self):
        booking = self.create_booking(self.owner, self.room)
        self.service.cancel_booking(booking.id, self.owner.id, "student")

        again = self.service.create_booking(self.other.id, self.room.id, date(2024, 2, 1), date(2024, 5, 1))
        self.assertEqual(again.status, BookingStatus.PENDING)


class TestUpdateBookingStatus(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.create_user()
        self.room = self.create_room()
        self.service = RoomBookingService(self.db, today=fixed_today)

    def test_full_lifecycle(self):
        booking = self.create_booking(self.user, self.room)

        for status in (BookingStatus.APPROVED, BookingStatus.ACTIVE, BookingStatus.COMPLETED):
            booking = self.service.update_booking_status(booking.id, status)
            self.assertEqual(booking.status, status)

    def test_reject_pending_with_note(self):
        booking = self.create_booking(self.user, self.room)
        booking = self.service.update_booking_status(booking.id, "rejected", notes="Room closed")

        self.assertEqual(booking.status, BookingStatus.REJECTED)
        self.assertEqual(booking.notes, "Room closed")

    def test_skipping_states_is_rejected(self):
        booking = self.create_booking(self.user, self.room)

        with self.assertRaises(ValidationError) as ctx:
            self.service.update_booking_status(booking.id, BookingStatus.COMPLETED)
        self.assertEqual(ctx.exception.error_code, ErrorCode.INVALID_STATE_TRANSITION)

    def test_terminal_states_are_final(self):
        booking = self.create_booking(self.user, self.room, status=BookingStatus.COMPLETED)

        with self.assertRaises(ValidationError):
            self.service.update_booking_status(booking.id, BookingStatus.CANCELLED)

    def test_missing_booking(self):
        booking = self.create_booking(self.user, self.room)
        self.db.delete(booking)
        self.db.commit()

        with self.assertRaises(ResourceNotFoundError):
            self.service.update_booking_status(booking.id, BookingStatus.APPROVED)


class TestBookingReads(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.user = self.create_user()
        self.other = self.create_user(email="other@example.com")
        self.room = self.create_room()
        self.service = RoomBookingService(self.db, today=fixed_today)

    def test_owner_and_admin_can_read(self):
        booking = self.create_booking(self.user, self.room)

        self.assertEqual(self.service.get_booking(booking.id, self.user.id, "student").id, booking.id)
        self.assertEqual(self.service.get_booking(booking.id, self.other.id, "admin").id, booking.id)

    def test_other_users_booking_reported_missing(self):
        booking = self.create_booking(self.user, self.room)

        with self.assertRaises(ResourceNotFoundError):
            self.service.get_booking(booking.id, self.other.id, "student")

    def test_list_paginates_and_filters(self):
        self.create_booking(self.user, self.room, check_in=date(2024, 2, 1), check_out=date(2024, 3, 1))
        self.create_booking(self.user, self.room, check_in=date(2024, 4, 1), check_out=date(2024, 5, 1))
        self.create_booking(
            self.user, self.room,
            check_in=date(2024, 6, 1), check_out=date(2024, 7, 1),
            status=BookingStatus.CANCELLED,
        )
        self.create_booking(self.other, self.room, check_in=date(2024, 8, 1), check_out=date(2024, 9, 1))

        items, total = self.service.list_bookings(self.user.id, page=1, limit=2)
        self.assertEqual(total, 3)
        self.assertEqual(len(items), 2)

        items, total = self.service.list_bookings(self.user.id, status=BookingStatus.CANCELLED)
        self.assertEqual(total, 1)
        self.assertEqual(items[0].status, BookingStatus.CANCELLED)
