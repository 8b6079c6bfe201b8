"""
Best-effort email notifications for bookings and payments.

Dispatch happens after the owning transaction commits. Delivery failures
are logged and never propagate to the caller.
"""

from decimal import Decimal
from typing import Callable, Optional

from hostel_booking.core.logging import get_logger
from hostel_booking.models.booking import Booking
from hostel_booking.models.payment import Payment
from hostel_booking.utils.email import EmailConfig, EmailError, EmailMessage, send_email


class NotificationDispatcher:
    """
    Sends transactional emails.

    ``sender`` defaults to SMTP delivery and can be replaced, e.g. by a
    mock in tests.
    """

    def __init__(
        self,
        config: Optional[EmailConfig] = None,
        sender: Callable[[EmailMessage, EmailConfig], None] = send_email,
    ):
        self.config = config or EmailConfig.from_settings()
        self.sender = sender
        self._logger = get_logger(__name__)

    def _dispatch(self, message: EmailMessage, kind: str) -> bool:
        if not self.config.is_configured:
            self._logger.debug(f"Email delivery disabled, skipping {kind}")
            return False
        try:
            self.sender(message, self.config)
        except EmailError as e:
            self._logger.warning(f"Failed to send {kind}: {e}", extra={"kind": kind})
            return False
        except Exception:
            self._logger.exception(f"Unexpected error sending {kind}", extra={"kind": kind})
            return False
        self._logger.info(f"Sent {kind}", extra={"kind": kind})
        return True

    def send_booking_confirmation(self, email: Optional[str], booking: Booking) -> bool:
        if not email:
            return False
        try:
            message = EmailMessage(
                subject="Booking received",
                to=[email],
                body_text=(
                    f"Your booking {booking.id} has been received.\n"
                    f"Check-in: {booking.check_in_date.isoformat()}\n"
                    f"Check-out: {booking.check_out_date.isoformat()}\n"
                    f"Duration: {booking.duration_months} month(s)\n"
                    f"Total: {_money(booking.total_amount)}\n"
                    f"Status: {booking.status.value}\n"
                ),
            )
        except EmailError as e:
            self._logger.warning(f"Cannot build booking confirmation: {e}")
            return False
        return self._dispatch(message, "booking_confirmation")

    def send_payment_receipt(self, email: Optional[str], payment: Payment) -> bool:
        if not email:
            return False
        try:
            message = EmailMessage(
                subject="Payment receipt",
                to=[email],
                body_text=(
                    f"We received your payment of {payment.currency} {_money(payment.amount)}.\n"
                    f"Reference: {payment.transaction_reference}\n"
                    f"Type: {payment.payment_type.value}\n"
                ),
            )
        except EmailError as e:
            self._logger.warning(f"Cannot build payment receipt: {e}")
            return False
        return self._dispatch(message, "payment_receipt")


def _money(amount: Decimal) -> str:
    return f"{Decimal(amount):,.2f}"
