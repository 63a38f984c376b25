import unittest

from fastapi.testclient import TestClient

from gateway_fakes import FakeGateway, build_orchestrator, catalog_with_extras
from travelpay.main import create_app
from travelpay.models import GatewayName, PaymentStatus
from travelpay.psp import GatewayRouter
from travelpay.services.idempotency import InMemoryIdempotencyLedger
from travelpay.services.payment_service import PaymentOrchestrator
from travelpay.services.pricing_service import PriceCalculator

BOOKING = {
    "destination": "Da Nang",
    "travelers": 2,
    "dates": {"startDate": "2025-10-25", "endDate": "2025-10-30", "duration": 5},
    "flights": {"outbound": {"id": "FL-AK6150", "price": 1}, "return": {"id": "FL-AK6149", "price": 1}},
    "hotels": {"selectedHotels": [{"id": "HT-RIVERSIDE", "nights": 2, "price": 1}]},
    "totalAmount": 2,
}


class TestPaymentApi(unittest.TestCase):
    def setUp(self):
        self.orchestrator, self.stripe, self.razer = build_orchestrator()
        self.client = TestClient(create_app(self.orchestrator))

    def create_intent(self, key="abc", method="card", booking=BOOKING):
        return self.client.post(
            "/payment-intent",
            json={"bookingDetails": booking, "idempotencyKey": key, "paymentMethod": method},
        )

    def test_create_payment_intent(self):
        r = self.create_intent()
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["calculatedAmount"], "1495.00")
        self.assertEqual(body["amountInSmallestUnit"], 149500)
        self.assertEqual(body["currency"], "MYR")
        self.assertEqual(body["gatewayName"], "stripe")
        self.assertFalse(body["isExisting"])
        self.assertTrue(body["clientSecret"])
        self.assertIn("x-request-id", r.headers)

    def test_replay(self):
        first = self.create_intent().json()
        second = self.create_intent().json()
        self.assertTrue(second["isExisting"])
        self.assertEqual(second["paymentIntentId"], first["paymentIntentId"])
        self.assertEqual(len(self.stripe.create_calls), 1)

    def test_unknown_reference(self):
        booking = dict(BOOKING, hotels={"selectedHotels": [{"id": "selected-hotel", "nights": 2}]})
        r = self.create_intent(booking=booking)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "REFERENCE_NOT_FOUND")
        self.assertEqual(self.stripe.create_calls, [])

    def test_mixed_currency(self):
        booking = dict(BOOKING, hotels={"selectedHotels": [{"id": "HT-USD-SUITES", "nights": 2}]})
        r = self.create_intent(booking=booking)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "CURRENCY_MISMATCH")

    def test_invalid_booking(self):
        r = self.create_intent(booking={"destination": "Da Nang"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "INVALID_BOOKING_DATA")

    def test_missing_idempotency_key(self):
        r = self.client.post("/payment-intent", json={"bookingDetails": BOOKING})
        self.assertEqual(r.status_code, 400)
        body = r.json()
        self.assertEqual(body["code"], "INVALID_BOOKING_DATA")
        self.assertIn("idempotencyKey", body["message"])
        self.assertEqual(self.stripe.create_calls, [])

    def test_malformed_body(self):
        r = self.client.post("/payment-intent", content=b"not json", headers={"content-type": "application/json"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "INVALID_BOOKING_DATA")

    def test_unconfigured_gateway(self):
        self.razer.configured = False
        r = self.create_intent(method="fpx")
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json()["code"], "NO_CONFIGURED_GATEWAY")

    def test_payment_methods(self):
        r = self.client.get("/payment-methods")
        self.assertEqual(r.status_code, 200)
        methods = {m["method"]: m for m in r.json()}
        self.assertEqual(set(methods), {"card", "alipay", "fpx", "duitnow_qr"})
        self.assertEqual(methods["fpx"]["gateway"], "razerpay")

    def confirm(self, payment_id, gateway="stripe"):
        return self.client.post(
            "/confirm-payment",
            json={"paymentIntentId": payment_id, "gatewayName": gateway, "bookingDetails": BOOKING},
        )

    def test_confirm_payment(self):
        payment_id = self.create_intent().json()["paymentIntentId"]
        r = self.confirm(payment_id)
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["status"], "completed")
        self.assertEqual(body["booking"]["totalAmount"], "1495.00")
        self.assertEqual(body["booking"]["hotelDetails"]["total"], "640.00")
        self.assertEqual(body["booking"]["status"], "confirmed")

    def test_confirm_amount_mismatch(self):
        payment_id = self.create_intent().json()["paymentIntentId"]
        self.stripe.settle(payment_id, amount_minor=149499)
        r = self.confirm(payment_id)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["code"], "AMOUNT_MISMATCH")
        self.assertFalse(r.json()["success"])

    def test_confirm_pending(self):
        payment_id = self.create_intent().json()["paymentIntentId"]
        self.stripe.settle(payment_id, status=PaymentStatus.PENDING)
        r = self.confirm(payment_id)
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.json()["success"])
        self.assertEqual(r.json()["status"], "pending")

    def test_confirm_unknown_gateway(self):
        r = self.confirm("pi_1", gateway="paypal")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "UNKNOWN_GATEWAY")

    def test_callback_ignored_when_mis_signed(self):
        r = self.client.post("/payment-callback", content=b"ORDER_1=completed")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ignored"})

    def test_callback_accepted(self):
        payment_id = self.create_intent(method="fpx").json()["paymentIntentId"]
        r = self.client.post(
            "/payment-callback",
            content=f"{payment_id}=failed".encode(),
            headers={"x-test-signature": "valid"},
        )
        self.assertEqual(r.json(), {"status": "ok", "paymentIntentId": payment_id, "paymentStatus": "failed"})

    def test_stripe_webhook_route(self):
        r = self.client.post("/payment-callback/stripe", content=b"{}")
        self.assertEqual(r.json(), {"status": "ignored"})

    def test_callback_for_unregistered_gateway_is_acknowledged(self):
        router = GatewayRouter()
        router.register(FakeGateway(GatewayName.STRIPE, ("card",)))
        orchestrator = PaymentOrchestrator(
            calculator=PriceCalculator(catalog_with_extras()),
            router=router,
            ledger=InMemoryIdempotencyLedger(),
        )
        client = TestClient(create_app(orchestrator))
        r = client.post(
            "/payment-callback",
            content=b"ORDER_1=completed",
            headers={"x-test-signature": "valid"},
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ignored"})


class TestCatalogApi(unittest.TestCase):
    def setUp(self):
        orchestrator, _, _ = build_orchestrator()
        self.client = TestClient(create_app(orchestrator))

    def test_health(self):
        r = self.client.get("/health")
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["ok"])

    def test_request_id_is_echoed(self):
        r = self.client.get("/health", headers={"X-Request-ID": "checkout-42"})
        self.assertEqual(r.headers["x-request-id"], "checkout-42")

    def test_malformed_request_id_is_replaced(self):
        r = self.client.get("/health", headers={"X-Request-ID": "x" * 500})
        self.assertEqual(len(r.headers["x-request-id"]), 32)

    def test_search_flights(self):
        r = self.client.get("/catalog/flights", params={"origin": "PEN", "destination": "DAD"})
        self.assertEqual(r.status_code, 200)
        ids = [f["id"] for f in r.json()]
        self.assertEqual(ids[0], "FL-AK6150")
        self.assertNotIn("FL-AK6149", ids)

    def test_get_item(self):
        r = self.client.get("/catalog/hotels/HT-RIVERSIDE")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["name"], "Riverside Boutique Resort")

        r = self.client.get("/catalog/activities/AC-NOPE")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["detail"], "Activity AC-NOPE not found")


if __name__ == "__main__":
    unittest.main()
