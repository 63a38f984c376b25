import unittest

from gateway_fakes import FakeGateway
from travelpay.errors import NoConfiguredGateway, UnknownGateway
from travelpay.models import GatewayName
from travelpay.psp import GatewayAdapter, GatewayRouter


def make_router(stripe_configured=True, razer_configured=True):
    router = GatewayRouter()
    stripe = router.register(FakeGateway(GatewayName.STRIPE, ("card", "alipay"), configured=stripe_configured))
    razer = router.register(FakeGateway(GatewayName.RAZERPAY, ("fpx", "duitnow_qr"), configured=razer_configured))
    return router, stripe, razer


class TestGatewayRouter(unittest.TestCase):
    def test_owner_serves_its_methods(self):
        router, stripe, razer = make_router()
        self.assertIs(router.select_gateway("card"), stripe)
        self.assertIs(router.select_gateway("alipay"), stripe)
        self.assertIs(router.select_gateway("fpx"), razer)
        self.assertIs(router.select_gateway("duitnow_qr"), razer)

    def test_owned_method_never_falls_back(self):
        # Razer owns fpx; Stripe being configured must not matter.
        router, _, _ = make_router(razer_configured=False)
        with self.assertRaises(NoConfiguredGateway) as ctx:
            router.select_gateway("fpx")
        self.assertEqual(ctx.exception.context["gateway"], "razerpay")

    def test_unowned_method_uses_default_baseline(self):
        router, stripe, _ = make_router()
        self.assertIs(router.select_gateway("apple_pay"), stripe)

    def test_unowned_method_without_default(self):
        router, _, _ = make_router(stripe_configured=False)
        with self.assertRaises(NoConfiguredGateway):
            router.select_gateway("apple_pay")

    def test_get_by_name(self):
        router, stripe, razer = make_router()
        self.assertIs(router.get("stripe"), stripe)
        self.assertIs(router.get("RAZERPAY"), razer)
        with self.assertRaises(UnknownGateway):
            router.get("paypal")

    def test_get_unregistered(self):
        router = GatewayRouter()
        router.register(FakeGateway(GatewayName.STRIPE))
        with self.assertRaises(UnknownGateway):
            router.get("razerpay")

    def test_available_methods_only_configured(self):
        router, _, _ = make_router(razer_configured=False)
        methods = {m.method: m for m in router.available_methods()}
        self.assertEqual(set(methods), {"card", "alipay"})
        self.assertEqual(methods["card"].name, "Credit/Debit Card")
        self.assertEqual(methods["alipay"].category, "wallet")

        router, _, _ = make_router()
        gateways = {m.method: m.gateway for m in router.available_methods()}
        self.assertEqual(gateways["fpx"], GatewayName.RAZERPAY)
        self.assertEqual(gateways["duitnow_qr"], GatewayName.RAZERPAY)


class TestGatewayAdapterContract(unittest.TestCase):
    def test_callback_verification_is_required(self):
        class NoCallbacks(GatewayAdapter):
            name = GatewayName.STRIPE

            def is_configured(self):
                return True

            async def create_payment(self, amount_minor, currency, method, metadata, idempotency_key=None):
                raise AssertionError("not called")

            async def confirm_payment(self, payment_id):
                raise AssertionError("not called")

        with self.assertRaises(TypeError):
            NoCallbacks(timeout=1)


if __name__ == "__main__":
    unittest.main()
