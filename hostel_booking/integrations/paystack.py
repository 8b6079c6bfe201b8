"""
Paystack payment gateway client.

Amounts cross this boundary in major units (Decimal) and are converted to
the gateway's minor units here. Webhook bodies are authenticated with an
HMAC-SHA512 of the raw request bytes sent in ``x-paystack-signature``.
"""

import json
import secrets
import string
import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import httpx

from hostel_booking.config.settings import Settings, settings
from hostel_booking.core.exceptions import PaymentGatewayError, WebhookPayloadError
from hostel_booking.core.logging import get_logger
from hostel_booking.utils.hashing import SignatureHelper

logger = get_logger(__name__)

SIGNATURE_HEADER = "x-paystack-signature"

EVENT_CHARGE_SUCCESS = "charge.success"
EVENT_CHARGE_FAILED = "charge.failed"

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def generate_payment_reference(now_ms: Optional[int] = None) -> str:
    """``PAY_<epoch milliseconds>_<7 uppercase alphanumerics>``"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(7))
    return f"PAY_{now_ms}_{suffix}"


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: Any) -> Optional[Decimal]:
    if amount is None:
        return None
    return (Decimal(str(amount)) / 100).quantize(Decimal("0.01"))


@dataclass
class InitializedTransaction:
    authorization_url: str
    access_code: Optional[str]
    reference: str
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VerifiedTransaction:
    """Outcome of a verify call as reported by the gateway."""
    reference: str
    request_ok: bool
    status: Optional[str]
    amount: Optional[Decimal]
    message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_successful(self) -> bool:
        return self.request_ok and self.status == "success"

    @property
    def is_failed(self) -> bool:
        return self.request_ok and self.status == "failed"


@dataclass
class WebhookEvent:
    event: str
    reference: Optional[str]
    data: Dict[str, Any]
    payload: Dict[str, Any]


class PaystackClient:
    """
    Thin synchronous client over the Paystack REST API.

    ``transport`` lets callers substitute an ``httpx`` transport, which the
    test suite uses with ``httpx.MockTransport``.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        config: Optional[Settings] = None,
    ):
        config = config or settings
        self.secret_key = secret_key if secret_key is not None else config.PAYSTACK_SECRET_KEY
        self.webhook_secret = webhook_secret if webhook_secret is not None else config.webhook_secret
        self.base_url = (base_url or config.PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or config.PAYSTACK_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.secret_key}",
                "Content-Type": "application/json",
            },
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self.secret_key:
            raise PaymentGatewayError("Payment gateway is not configured")
        try:
            with self._client() as client:
                return client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Paystack request failed: {method} {path}: {e}")
            raise PaymentGatewayError(
                "Payment gateway request failed",
                details={"path": path, "error": type(e).__name__},
            ) from e

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise PaymentGatewayError(
                "Payment gateway returned an invalid response",
                details={"status_code": response.status_code},
            ) from e
        if not isinstance(body, dict):
            raise PaymentGatewayError(
                "Payment gateway returned an invalid response",
                details={"status_code": response.status_code},
            )
        return body

    # ==================== Transactions ====================

    def initialize_transaction(
        self,
        *,
        email: str,
        amount: Decimal,
        reference: str,
        currency: str,
        callback_url: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> InitializedTransaction:
        """
        Create a hosted checkout for ``amount``.

        Raises:
            PaymentGatewayError: transport failure or the gateway refused the call
        """
        payload: Dict[str, Any] = {
            "email": email,
            "amount": to_minor_units(amount),
            "reference": reference,
            "currency": currency,
            "metadata": metadata or {},
        }
        if callback_url:
            payload["callback_url"] = callback_url

        response = self._request("POST", "/transaction/initialize", json=payload)
        body = self._json(response)

        if response.is_error or not body.get("status"):
            logger.warning(
                "Paystack initialize rejected",
                extra={"reference": reference, "status_code": response.status_code},
            )
            raise PaymentGatewayError(
                body.get("message") or "Payment initialization failed",
                details={"status_code": response.status_code, "reference": reference},
            )

        data = body.get("data") or {}
        return InitializedTransaction(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code"),
            reference=data.get("reference") or reference,
            raw=body,
        )

    def verify_transaction(self, reference: str) -> VerifiedTransaction:
        """
        Ask the gateway for the final state of ``reference``.

        Client errors (unknown reference and the like) are reported through
        ``request_ok=False`` rather than raised.

        Raises:
            PaymentGatewayError: transport failure or gateway server error
        """
        response = self._request("GET", f"/transaction/verify/{reference}")
        if response.status_code >= 500:
            raise PaymentGatewayError(
                "Payment gateway unavailable",
                details={"status_code": response.status_code, "reference": reference},
            )
        body = self._json(response)
        data = body.get("data") or {}
        if not isinstance(data, dict):
            data = {}

        return VerifiedTransaction(
            reference=data.get("reference") or reference,
            request_ok=body.get("status") is True and not response.is_error,
            status=data.get("status"),
            amount=from_minor_units(data.get("amount")),
            message=body.get("message"),
            raw=body,
        )

    # ==================== Webhooks ====================

    def verify_signature(self, raw_body: bytes, signature: Optional[str]) -> bool:
        return SignatureHelper.verify(self.webhook_secret, raw_body, signature, "sha512")

    @staticmethod
    def parse_event(raw_body: bytes) -> WebhookEvent:
        """
        Decode a webhook body.

        Raises:
            WebhookPayloadError: not JSON, missing event or data, or a charge
                event without a reference
        """
        try:
            payload = json.loads(raw_body)
        except (ValueError, UnicodeDecodeError) as e:
            raise WebhookPayloadError("Invalid event format") from e

        if not isinstance(payload, dict):
            raise WebhookPayloadError("Invalid event format")

        event = payload.get("event")
        data = payload.get("data")
        if not isinstance(event, str) or not event or not isinstance(data, dict):
            raise WebhookPayloadError("Invalid event format")

        reference = data.get("reference")
        if not isinstance(reference, str) or not reference:
            if event in (EVENT_CHARGE_SUCCESS, EVENT_CHARGE_FAILED):
                raise WebhookPayloadError("Missing transaction reference")
            reference = None

        return WebhookEvent(event=event, reference=reference, data=data, payload=payload)
