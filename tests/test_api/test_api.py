import json
from datetime import date
from decimal import Decimal

import httpx
import jwt
from fastapi.testclient import TestClient

from hostel_booking.api import deps
from hostel_booking.config.settings import settings
from hostel_booking.db.session import get_db
from hostel_booking.integrations.paystack import SIGNATURE_HEADER, PaystackClient
from hostel_booking.main import create_app
from hostel_booking.models import BookingStatus, Payment, PaymentStatus, UserRole
from hostel_booking.utils.hashing import SignatureHelper
from tests.helpers import DatabaseTestCase

API = settings.API_V1_STR
NEXT_YEAR = date.today().year + 1


def gateway_handler(request):
    if request.url.path == "/transaction/initialize":
        reference = json.loads(request.content)["reference"]
        return httpx.Response(200, json={
            "status": True,
            "message": "Authorization URL created",
            "data": {
                "authorization_url": f"https://checkout.paystack.com/{reference}",
                "access_code": "access",
                "reference": reference,
            },
        })
    reference = request.url.path.rsplit("/", 1)[-1]
    return httpx.Response(200, json={
        "status": True,
        "message": "Verification successful",
        "data": {"reference": reference, "status": "success", "amount": 150000},
    })


class ApiTestCase(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.app = create_app(create_schema=False)

        def override_get_db():
            yield self.db

        self.gateway = PaystackClient(
            secret_key="sk_test",
            webhook_secret="whsec_test",
            base_url="https://api.paystack.test",
            transport=httpx.MockTransport(gateway_handler),
        )
        self.app.dependency_overrides[get_db] = override_get_db
        self.app.dependency_overrides[deps.get_payment_gateway] = lambda: self.gateway
        self.client = TestClient(self.app)

        self.student = self.create_user()
        self.admin = self.create_user(email="admin@example.com", role=UserRole.ADMIN)
        self.room = self.create_room(price=Decimal("500.00"))

    def tearDown(self):
        self.app.dependency_overrides.clear()
        super().tearDown()

    def auth(self, user):
        token = jwt.encode({"userId": str(user.id)}, settings.JWT_SECRET_KEY, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    def book_room(self, user, check_in=None, check_out=None):
        return self.client.post(
            f"{API}/bookings",
            json={
                "room_id": str(self.room.id),
                "check_in_date": (check_in or date(NEXT_YEAR, 2, 1)).isoformat(),
                "check_out_date": (check_out or date(NEXT_YEAR, 5, 1)).isoformat(),
            },
            headers=self.auth(user),
        )


class TestSystemEndpoints(ApiTestCase):

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertIn("X-Request-ID", response.headers)

    def test_rooms_are_public(self):
        response = self.client.get(f"{API}/rooms", params={"sort": "price_asc"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["pagination"]["total"], 1)
        self.assertEqual(body["data"]["items"][0]["room_number"], "A101")


class TestAuthentication(ApiTestCase):

    def test_missing_token(self):
        response = self.client.get(f"{API}/bookings")

        self.assertEqual(response.status_code, 401)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error_code"], "AUTHENTICATION_FAILED")

    def test_token_with_wrong_key(self):
        token = jwt.encode({"userId": str(self.student.id)}, "another-secret", algorithm="HS256")
        response = self.client.get(f"{API}/bookings", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)

    def test_sub_claim_is_accepted(self):
        token = jwt.encode({"sub": str(self.student.id)}, settings.JWT_SECRET_KEY, algorithm="HS256")
        response = self.client.get(f"{API}/bookings", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)


class TestBookingEndpoints(ApiTestCase):

    def test_create_booking(self):
        response = self.book_room(self.student)

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["duration_months"], 3)
        self.assertEqual(Decimal(data["total_amount"]), Decimal("1500"))

    def test_overlap_returns_conflict_envelope(self):
        self.book_room(self.student)

        response = self.book_room(self.student, date(NEXT_YEAR, 3, 1), date(NEXT_YEAR, 6, 1))

        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Room is already booked for the selected dates")
        self.assertEqual(body["error_code"], "BOOKING_CONFLICT")

    def test_missing_field_returns_field_errors(self):
        response = self.client.post(
            f"{API}/bookings",
            json={"room_id": str(self.room.id), "check_in_date": f"{NEXT_YEAR}-02-01"},
            headers=self.auth(self.student),
        )

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("check_out_date", [e["field"] for e in body["errors"]])

    def test_status_update_requires_admin(self):
        booking_id = self.book_room(self.student).json()["data"]["id"]

        forbidden = self.client.put(
            f"{API}/bookings/{booking_id}", json={"status": "approved"}, headers=self.auth(self.student)
        )
        self.assertEqual(forbidden.status_code, 403)

        approved = self.client.put(
            f"{API}/bookings/{booking_id}", json={"status": "approved"}, headers=self.auth(self.admin)
        )
        self.assertEqual(approved.status_code, 200)
        self.assertEqual(approved.json()["data"]["status"], "approved")

    def test_cancel_booking(self):
        booking_id = self.book_room(self.student).json()["data"]["id"]

        response = self.client.delete(f"{API}/bookings/{booking_id}", headers=self.auth(self.student))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()["data"]["refund_amount"]), Decimal("0"))


class TestShuttleEndpoints(ApiTestCase):

    def test_book_shuttle_returns_qr_code(self):
        route = self.create_route(total_seats=3)

        response = self.client.post(
            f"{API}/shuttles/book",
            json={"route_id": str(route.id), "booking_date": f"{NEXT_YEAR}-01-10", "seats": 2},
            headers=self.auth(self.student),
        )

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["seats_booked"], 2)
        self.assertTrue(data["qr_code"].startswith("data:image/png;base64,"))

        availability = self.client.get(
            f"{API}/shuttles/routes/{route.id}/availability", params={"date": f"{NEXT_YEAR}-01-10"}
        )
        self.assertEqual(availability.json()["data"]["available_seats"], 1)

        full = self.client.post(
            f"{API}/shuttles/book",
            json={"route_id": str(route.id), "booking_date": f"{NEXT_YEAR}-01-10", "seats": 2},
            headers=self.auth(self.student),
        )
        self.assertEqual(full.status_code, 409)


class TestPaymentEndpoints(ApiTestCase):

    def initialize(self, booking_id):
        return self.client.post(
            f"{API}/payments/initialize",
            json={"amount": 1500, "payment_type": "room_booking", "reference_id": booking_id},
            headers=self.auth(self.student),
        )

    def test_initialize_then_verify(self):
        booking_id = self.book_room(self.student).json()["data"]["id"]

        init = self.initialize(booking_id)
        self.assertEqual(init.status_code, 200)
        reference = init.json()["data"]["reference"]
        self.assertRegex(reference, r"^PAY_\d+_[A-Z0-9]{7}$")
        self.assertTrue(init.json()["data"]["payment_link"].endswith(reference))

        verify = self.client.get(f"{API}/payments/verify", params={"reference": reference})
        self.assertEqual(verify.status_code, 200)
        self.assertEqual(verify.json()["data"]["status"], "completed")

        again = self.client.post(f"{API}/payments/verify", params={"reference": reference})
        self.assertEqual(again.status_code, 200)
        self.assertEqual(again.json()["message"], "Payment already verified")

        booking = self.client.get(f"{API}/bookings/{booking_id}", headers=self.auth(self.student))
        self.assertEqual(booking.json()["data"]["status"], BookingStatus.ACTIVE.value)
        self.assertEqual(Decimal(booking.json()["data"]["amount_paid"]), Decimal("1500"))

    def test_verify_unknown_reference(self):
        response = self.client.get(f"{API}/payments/verify", params={"reference": "PAY_0_NOTHERE"})
        self.assertEqual(response.status_code, 404)

    def test_initialize_rejects_non_positive_amount(self):
        response = self.client.post(
            f"{API}/payments/initialize",
            json={"amount": 0, "payment_type": "other_fees"},
            headers=self.auth(self.student),
        )
        self.assertEqual(response.status_code, 400)

    def test_webhook_requires_valid_signature(self):
        body = json.dumps({"event": "charge.success", "data": {"reference": "PAY_1_ABCDEFG"}}).encode()

        response = self.client.post(
            f"{API}/payments/webhook",
            content=body,
            headers={SIGNATURE_HEADER: "bad", "Content-Type": "application/json"},
        )

        self.assertEqual(response.status_code, 401)

    def test_webhook_non_ascii_signature_is_unauthorized(self):
        body = json.dumps({"event": "charge.success", "data": {"reference": "PAY_1_ABCDEFG"}}).encode()

        response = self.client.post(
            f"{API}/payments/webhook",
            content=body,
            headers={SIGNATURE_HEADER: ("é" * 128).encode("latin-1"), "Content-Type": "application/json"},
        )

        self.assertEqual(response.status_code, 401)

    def test_webhook_event_without_reference_acknowledged(self):
        body = json.dumps({"event": "customer.identification.success", "data": {"customer_id": 1}}).encode()
        headers = {
            SIGNATURE_HEADER: SignatureHelper.sign("whsec_test", body),
            "Content-Type": "application/json",
        }

        response = self.client.post(f"{API}/payments/webhook", content=body, headers=headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"received": True})

    def test_webhook_settles_payment(self):
        booking = self.create_booking(self.student, self.room)
        self.create_payment(self.student, "PAY_1_ABCDEFG", booking=booking)
        body = json.dumps({
            "event": "charge.success",
            "data": {"reference": "PAY_1_ABCDEFG", "amount": 150000, "status": "success"},
        }).encode()
        headers = {
            SIGNATURE_HEADER: SignatureHelper.sign("whsec_test", body),
            "Content-Type": "application/json",
        }

        first = self.client.post(f"{API}/payments/webhook", content=body, headers=headers)
        replay = self.client.post(f"{API}/payments/webhook", content=body, headers=headers)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), {"received": True})
        self.assertEqual(replay.status_code, 200)
        payment = self.db.query(Payment).filter_by(transaction_reference="PAY_1_ABCDEFG").one()
        self.db.refresh(payment)
        self.assertEqual(payment.status, PaymentStatus.COMPLETED)
        self.assertEqual(self.reload(booking).amount_paid, Decimal("1500.00"))

    def test_balance(self):
        self.create_booking(
            self.student, self.room, total=Decimal("900.00"),
            amount_paid=Decimal("300.00"), status=BookingStatus.ACTIVE,
        )

        response = self.client.get(f"{API}/payments/balance", headers=self.auth(self.student))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()["data"]["outstanding_balance"]), Decimal("600"))

    def test_webhook_events_admin_only(self):
        response = self.client.get(f"{API}/payments/webhook-events", headers=self.auth(self.student))
        self.assertEqual(response.status_code, 403)

        response = self.client.get(f"{API}/payments/webhook-events", headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], [])
