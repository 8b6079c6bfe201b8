"""
Payment reconciliation service.

Payments reach ``completed`` through exactly one function,
``apply_payment_completion``, whichever entry point saw the gateway's
confirmation first (client-side verify or server-side webhook). It flips
the payment with a compare-and-set UPDATE and credits the linked booking
in the same transaction, so a reference is credited at most once.
"""

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from hostel_booking.config.settings import Settings, settings
from hostel_booking.core.exceptions import (
    ErrorCode,
    PaymentGatewayError,
    PaymentVerificationError,
    ResourceNotFoundError,
    ValidationError,
    WebhookPayloadError,
)
from hostel_booking.integrations.paystack import (
    EVENT_CHARGE_FAILED,
    EVENT_CHARGE_SUCCESS,
    PaystackClient,
    WebhookEvent,
    from_minor_units,
    generate_payment_reference,
)
from hostel_booking.models.enums import PaymentMethod, PaymentStatus, PaymentType
from hostel_booking.models.payment import Payment
from hostel_booking.models.user import User
from hostel_booking.models.webhook_event import UnmatchedWebhookEvent
from hostel_booking.repositories.booking_repository import BookingRepository
from hostel_booking.repositories.payment_repository import PaymentRepository
from hostel_booking.repositories.webhook_event_repository import WebhookEventRepository
from hostel_booking.schemas.payment import PaymentHistoryFilters
from hostel_booking.services.base_service import BaseService
from hostel_booking.services.notification_service import NotificationDispatcher


class SettlementOutcome(str, enum.Enum):
    """Result of one settlement attempt."""
    APPLIED = "applied"
    ALREADY_COMPLETED = "already_completed"
    NOT_PENDING = "not_pending"
    NOT_FOUND = "not_found"


@dataclass
class WebhookResult:
    """HTTP status and JSON body the webhook endpoint answers with."""
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)


class PaymentService(BaseService):
    """
    Payment lifecycle: initialize, verify, webhook, settlement and reporting.
    """

    def __init__(
        self,
        db_session,
        gateway: PaystackClient,
        notifier: Optional[NotificationDispatcher] = None,
        config: Optional[Settings] = None,
        **kwargs,
    ):
        super().__init__(db_session, **kwargs)
        self.gateway = gateway
        self.notifier = notifier
        self.config = config or settings
        self.payments = PaymentRepository(db_session)
        self.bookings = BookingRepository(db_session)
        self.webhook_events = WebhookEventRepository(db_session)

    # -------------------------------------------------------------------------
    # Initialize
    # -------------------------------------------------------------------------

    def _resolve_booking_id(self, user_id: UUID, reference_id: Optional[str]) -> UUID:
        if not reference_id:
            raise ValidationError(
                "reference_id must name the booking being paid for",
                field_errors=[{"field": "reference_id", "message": "Booking id is required"}],
            )
        try:
            booking_id = UUID(str(reference_id))
        except ValueError:
            raise ResourceNotFoundError("Booking", reference_id)

        booking = self.bookings.find_by_id(booking_id)
        if booking is None or booking.user_id != user_id:
            raise ResourceNotFoundError("Booking", reference_id)
        if booking.status.is_terminal:
            raise ValidationError(
                f"Cannot pay for a booking that is {booking.status.value}",
                error_code=ErrorCode.INVALID_STATE_TRANSITION,
            )
        return booking.id

    def initialize_payment(
        self,
        user_id: UUID,
        amount: Union[Decimal, int, str],
        payment_type: Union[PaymentType, str],
        reference_id: Optional[str] = None,
        payment_method: Union[PaymentMethod, str] = PaymentMethod.PAYSTACK,
    ) -> Dict[str, Any]:
        """
        Record a pending payment and open a hosted checkout for it.

        The pending row is committed before the gateway is called, so a
        webhook can never arrive for a reference we have not stored.

        Raises:
            ValidationError: non-positive amount or unpayable booking
            ResourceNotFoundError: user or booking missing
            PaymentGatewayError: gateway refused or unreachable; the payment
                is marked failed before this propagates
        """
        amount = Decimal(str(amount)).quantize(Decimal("0.01"))
        if amount <= 0:
            raise ValidationError(
                "Payment amount must be greater than zero",
                field_errors=[{"field": "amount", "message": "Must be greater than zero"}],
            )
        payment_type = PaymentType(payment_type)
        payment_method = PaymentMethod(payment_method)

        user = self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))

        reference = generate_payment_reference(int(self.clock().timestamp() * 1000))

        with self.transaction():
            booking_id = None
            if payment_type == PaymentType.ROOM_BOOKING:
                booking_id = self._resolve_booking_id(user_id, reference_id)

            payment = self.payments.add(
                Payment(
                    user_id=user_id,
                    booking_id=booking_id,
                    amount=amount,
                    currency=self.config.PAYMENT_CURRENCY,
                    payment_method=payment_method,
                    payment_type=payment_type,
                    reference_id=reference_id,
                    transaction_reference=reference,
                    status=PaymentStatus.PENDING,
                )
            )

        try:
            checkout = self.gateway.initialize_transaction(
                email=user.email,
                amount=amount,
                reference=reference,
                currency=payment.currency,
                callback_url=self.config.payment_callback_url,
                metadata={
                    "paymentId": str(payment.id),
                    "userId": str(user_id),
                    "paymentType": payment_type.value,
                },
            )
        except PaymentGatewayError as e:
            self._logger.error(
                f"Payment initialization failed: {e.message}",
                extra={"reference": reference, "payment_id": str(payment.id)},
            )
            self.apply_payment_failure(reference, e.message)
            raise

        with self.transaction():
            if checkout.reference != reference:
                self._logger.info(
                    "Gateway assigned a different reference",
                    extra={"reference": reference, "gateway_reference": checkout.reference},
                )
                self.payments.update_reference(payment, checkout.reference)
            payment.gateway_response = checkout.raw

        self._logger.info(
            "Payment initialized",
            extra={
                "reference": payment.transaction_reference,
                "payment_id": str(payment.id),
                "amount": str(amount),
            },
        )
        return {
            "payment_id": payment.id,
            "reference": payment.transaction_reference,
            "payment_link": checkout.authorization_url,
            "access_code": checkout.access_code,
            "amount": amount,
            "currency": payment.currency,
        }

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def apply_payment_completion(
        self,
        reference: str,
        gateway_response: Optional[Dict[str, Any]] = None,
    ) -> SettlementOutcome:
        """
        Settle ``reference``: mark it completed and credit its booking.

        Safe to call any number of times; only the first call that finds the
        payment pending changes anything.
        """
        with self.transaction():
            won = self.payments.mark_completed_if_pending(reference, self.clock(), gateway_response)
            payment = self.payments.find_by_transaction_reference(reference)

            if not won:
                if payment is None:
                    outcome = SettlementOutcome.NOT_FOUND
                elif payment.status == PaymentStatus.COMPLETED:
                    outcome = SettlementOutcome.ALREADY_COMPLETED
                else:
                    outcome = SettlementOutcome.NOT_PENDING
                self._logger.info(
                    f"Settlement skipped: {outcome.value}",
                    extra={"reference": reference},
                )
                return outcome

            if payment.booking_id is not None:
                booking = self.bookings.find_by_id(
                    payment.booking_id, include_deleted=True, for_update=True
                )
                if booking is None:
                    self._logger.warning(
                        "Settled payment references a missing booking",
                        extra={"reference": reference, "booking_id": str(payment.booking_id)},
                    )
                elif booking.status.is_terminal:
                    self._logger.warning(
                        f"Payment settled against {booking.status.value} booking; balance left unchanged",
                        extra={"reference": reference, "booking_id": str(booking.id)},
                    )
                else:
                    booking.apply_payment(Decimal(payment.amount))
                    self.db.flush()
                    self._logger.info(
                        "Booking balance updated",
                        extra={
                            "reference": reference,
                            "booking_id": str(booking.id),
                            "outstanding_balance": str(booking.outstanding_balance),
                            "booking_status": booking.status.value,
                        },
                    )

        self._logger.info("Payment completed", extra={"reference": reference})

        if self.notifier is not None:
            user = self.db.get(User, payment.user_id)
            self.notifier.send_payment_receipt(user.email if user else None, payment)

        return SettlementOutcome.APPLIED

    def apply_payment_failure(
        self,
        reference: str,
        reason: Optional[str],
        gateway_response: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Mark ``reference`` failed if it is still pending. Returns whether it changed."""
        with self.transaction():
            changed = self.payments.mark_failed_if_pending(
                reference, reason, self.clock(), gateway_response
            )
        if changed:
            self._logger.info("Payment marked failed", extra={"reference": reference})
        else:
            self._logger.info(
                "Payment failure ignored: not pending or unknown",
                extra={"reference": reference},
            )
        return changed

    def _check_amount(self, reference: str, gateway_amount: Optional[Decimal]) -> None:
        if gateway_amount is None:
            return
        payment = self.payments.find_by_transaction_reference(reference)
        if payment is not None and Decimal(payment.amount) != gateway_amount:
            self._logger.warning(
                "Gateway amount differs from recorded amount",
                extra={
                    "reference": reference,
                    "recorded_amount": str(payment.amount),
                    "gateway_amount": str(gateway_amount),
                },
            )

    # -------------------------------------------------------------------------
    # Verify
    # -------------------------------------------------------------------------

    def verify_payment(self, reference: str) -> Tuple[Payment, SettlementOutcome]:
        """
        Confirm ``reference`` with the gateway and settle it.

        Raises:
            ResourceNotFoundError: no local payment carries this reference
            PaymentVerificationError: gateway does not report success, or the
                payment already failed locally
            PaymentGatewayError: gateway unreachable
        """
        payment = self.payments.find_by_transaction_reference(reference)
        if payment is None:
            raise ResourceNotFoundError("Payment", reference)

        result = self.gateway.verify_transaction(reference)

        if not result.is_successful:
            if result.is_failed:
                gateway_reason = (result.raw.get("data") or {}).get("gateway_response")
                self.apply_payment_failure(
                    reference,
                    gateway_reason or result.message or "Payment failed at gateway",
                    result.raw,
                )
            self._logger.info(
                "Payment verification unsuccessful",
                extra={"reference": reference, "gateway_status": result.status},
            )
            raise PaymentVerificationError(reference=reference, gateway_status=result.status)

        self._check_amount(reference, result.amount)
        outcome = self.apply_payment_completion(reference, result.raw)

        if outcome == SettlementOutcome.NOT_PENDING:
            self._logger.error(
                "Gateway reports success for a payment recorded as failed",
                extra={"reference": reference},
            )
            raise PaymentVerificationError(
                "Payment is no longer pending",
                reference=reference,
                gateway_status=result.status,
            )

        return self.payments.find_by_transaction_reference(reference), outcome

    # -------------------------------------------------------------------------
    # Webhook
    # -------------------------------------------------------------------------

    def handle_webhook(self, raw_body: bytes, signature: Optional[str]) -> WebhookResult:
        """
        Authenticate, parse and apply one gateway webhook delivery.

        Once a delivery is authenticated and parsed the answer is always 200,
        otherwise the gateway keeps retrying events we cannot act on.
        """
        if not self.gateway.verify_signature(raw_body, signature):
            self._logger.warning(
                "Webhook rejected: invalid signature",
                extra={"signature_present": bool(signature)},
            )
            return WebhookResult(401, {"success": False, "message": "Invalid signature"})

        try:
            event = self.gateway.parse_event(raw_body)
        except WebhookPayloadError as e:
            self._logger.warning(f"Webhook rejected: {e.message}")
            return WebhookResult(400, {"success": False, "message": e.message})

        try:
            self._process_event(event)
        except Exception:
            self._logger.exception(
                "Webhook processing error",
                extra={"event": event.event, "reference": event.reference},
            )
            return WebhookResult(200, {"received": True, "error": "Processing error"})

        return WebhookResult(200, {"received": True})

    def _process_event(self, event: WebhookEvent) -> None:
        log_extra = {"event": event.event, "reference": event.reference}

        if event.event == EVENT_CHARGE_SUCCESS:
            self._check_amount(event.reference, from_minor_units(event.data.get("amount")))
            outcome = self.apply_payment_completion(event.reference, event.payload)
            if outcome == SettlementOutcome.NOT_FOUND:
                with self.transaction():
                    self.webhook_events.record(event.event, event.reference, event.payload)
                self._logger.warning("Webhook for unknown reference stored for reconciliation", extra=log_extra)
            else:
                self._logger.info(f"charge.success handled: {outcome.value}", extra=log_extra)

        elif event.event == EVENT_CHARGE_FAILED:
            reason = event.data.get("gateway_response") or "Charge failed"
            self.apply_payment_failure(event.reference, reason, event.payload)

        elif event.event.startswith("transfer."):
            self._logger.info("Transfer event ignored", extra=log_extra)

        else:
            self._logger.info("Unhandled webhook event", extra=log_extra)

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def list_unmatched_events(self, include_resolved: bool = False) -> List[UnmatchedWebhookEvent]:
        return self.webhook_events.list_events(include_resolved=include_resolved)

    def reprocess_unmatched_event(self, event_id: UUID) -> Tuple[UnmatchedWebhookEvent, SettlementOutcome]:
        """
        Replay a stored ``charge.success`` once its payment exists locally.

        Raises:
            ResourceNotFoundError: event missing, or still no matching payment
            ValidationError: event already resolved or not a charge.success
        """
        stored = self.webhook_events.get_by_id(event_id)
        if stored.is_resolved:
            raise ValidationError("Webhook event is already resolved")
        if stored.event != EVENT_CHARGE_SUCCESS:
            raise ValidationError(f"Events of type {stored.event} cannot be reprocessed")

        outcome = self.apply_payment_completion(stored.reference, stored.payload)
        if outcome == SettlementOutcome.NOT_FOUND:
            raise ResourceNotFoundError(
                "Payment",
                stored.reference,
                "No payment matches this event's reference",
            )

        with self.transaction():
            self.webhook_events.resolve(stored, f"Reprocessed: {outcome.value}", self.clock())

        self._logger.info(
            "Unmatched webhook event reprocessed",
            extra={"event_id": str(event_id), "reference": stored.reference, "outcome": outcome.value},
        )
        return stored, outcome

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_payment_history(
        self,
        user_id: UUID,
        filters: Optional[PaymentHistoryFilters] = None,
    ) -> Tuple[List[Payment], int, Dict[str, Decimal]]:
        filters = filters or PaymentHistoryFilters()
        items, total = self.payments.list_for_user(
            user_id,
            status=filters.status,
            payment_type=filters.payment_type,
            start_date=filters.start_date,
            end_date=filters.end_date,
            page=filters.page,
            limit=filters.limit,
        )
        summary = {
            "total_paid": self.payments.total_completed(user_id),
            "outstanding_balance": self.bookings.balance_totals(user_id)["outstanding_balance"],
        }
        return items, total, summary

    def get_balance(self, user_id: UUID) -> Dict[str, Any]:
        totals = self.bookings.balance_totals(user_id)
        return {
            **totals,
            "total_payments": self.payments.total_completed(user_id),
            "last_payment_at": self.payments.last_completed_at(user_id),
        }
