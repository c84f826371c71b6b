# payments/tests/fakes.py

import hashlib
import hmac
import itertools

from core.exceptions import UpstreamError


class FakeGateway:
    """In-memory stand-in for RazorpayGateway (same two calls, same signature scheme)."""

    key_id = "rzp_test_fake"
    key_secret = "fake-secret"

    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.created = []
        self._ids = itertools.count(1)

    def create_remote_order(self, amount, currency="INR", metadata=None):
        if self.fail:
            raise UpstreamError("Razorpay URLError: timed out")
        gateway_order_id = f"order_fake{next(self._ids):06d}"
        self.created.append({"amount": amount, "currency": currency, "metadata": dict(metadata or {})})
        return {"gateway_order_id": gateway_order_id, "currency": currency, "status": "created"}

    def sign(self, order_id, payment_id):
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self.key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id, payment_id, signature):
        return hmac.compare_digest(self.sign(order_id, payment_id), str(signature or ""))
