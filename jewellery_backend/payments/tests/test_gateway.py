# payments/tests/test_gateway.py

import hashlib
import hmac
import io
import json
from decimal import Decimal
from unittest import mock
from urllib.error import URLError

from django.test import SimpleTestCase, override_settings

from core.exceptions import UpstreamError
from payments.gateway import RazorpayGateway, to_paise


class _FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class RazorpayGatewayTests(SimpleTestCase):
    """
    GUARANTEES:
    - amounts go over the wire in paise
    - signatures are HMAC-SHA256 of "order|payment" with the key secret
    - transport failures surface as UpstreamError
    """

    def setUp(self):
        self.gateway = RazorpayGateway("rzp_test_key", "s3cret")

    def test_to_paise_rounds_half_up(self):
        self.assertEqual(to_paise(Decimal("12180.00")), 1218000)
        self.assertEqual(to_paise("0.005"), 1)

    def test_verify_signature(self):
        good = hmac.new(b"s3cret", b"order_1|pay_1", hashlib.sha256).hexdigest()
        self.assertTrue(self.gateway.verify_signature("order_1", "pay_1", good))
        self.assertFalse(self.gateway.verify_signature("order_1", "pay_2", good))
        self.assertFalse(self.gateway.verify_signature("order_1", "pay_1", ""))

    def test_create_remote_order_sends_paise(self):
        body = json.dumps({"id": "order_ABC", "amount": 50000, "currency": "INR", "status": "created"})
        with mock.patch("payments.gateway.urlopen", return_value=_FakeResponse(body.encode("utf-8"))) as urlopen:
            remote = self.gateway.create_remote_order(Decimal("500.00"), "INR", {"order_id": "202601010001"})

        sent = json.loads(urlopen.call_args.args[0].data.decode("utf-8"))
        self.assertEqual(sent["amount"], 50000)
        self.assertEqual(sent["notes"], {"order_id": "202601010001"})
        self.assertEqual(remote["gateway_order_id"], "order_ABC")
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 25)

    def test_transport_failure(self):
        with mock.patch("payments.gateway.urlopen", side_effect=URLError("timed out")):
            with self.assertRaises(UpstreamError):
                self.gateway.create_remote_order(Decimal("1"), "INR")

    def test_missing_credentials(self):
        with self.assertRaises(UpstreamError):
            RazorpayGateway("", "").create_remote_order(Decimal("1"), "INR")

    @override_settings(PAYMENTS={"RAZORPAY": {"KEY_ID": "k", "KEY_SECRET": "s", "TIMEOUT_SECONDS": 10}})
    def test_from_settings(self):
        gateway = RazorpayGateway.from_settings()
        self.assertEqual((gateway.key_id, gateway.key_secret, gateway.timeout), ("k", "s", 10))
