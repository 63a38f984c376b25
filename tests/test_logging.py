import unittest

from travelpay.logging_config import MASK, add_app_context, redact_sensitive


class TestLoggingProcessors(unittest.TestCase):
    def test_redacts_gateway_secrets(self):
        event = redact_sensitive(None, "info", {
            "event": "razer_payment_created",
            "order_id": "ORDER_1",
            "vcode": "abc123",
            "client_secret": "pi_1_secret",
            "params": {"skey": "def456", "amount": 149500},
        })
        self.assertEqual(event["order_id"], "ORDER_1")
        self.assertEqual(event["vcode"], MASK)
        self.assertEqual(event["client_secret"], MASK)
        self.assertEqual(event["params"], {"skey": MASK, "amount": 149500})

    def test_app_context(self):
        event = add_app_context(None, "info", {"event": "app_started"})
        self.assertEqual(event["app"], "travelpay")
        self.assertIn("environment", event)
        self.assertIn("version", event)


if __name__ == "__main__":
    unittest.main()
