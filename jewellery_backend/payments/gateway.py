# payments/gateway.py

"""
======================================================
PATH: payments/gateway.py
======================================================
RAZORPAY GATEWAY CLIENT

Capability used by the engine:
- create_remote_order(amount, currency, metadata) -> {"gateway_order_id", ...}
- verify_signature(order_id, payment_id, signature) -> bool

Notes:
- Amounts are given in rupees and sent in paise (x100, half-up).
- Signature = HMAC-SHA256("<order_id>|<payment_id>", key_secret), hex.
- One-shot calls with a timeout. No retries; failures raise UpstreamError.
- Built from settings.PAYMENTS["RAZORPAY"] and passed into services explicitly.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

RAZORPAY_BASE = "https://api.razorpay.com/v1"
DEFAULT_TIMEOUT_SECONDS = 25


def to_paise(amount) -> int:
    try:
        rupees = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError("amount must be a valid Decimal") from exc
    return int((rupees * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json(raw: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(raw or "")
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, *, timeout: int = DEFAULT_TIMEOUT_SECONDS, base_url: str = RAZORPAY_BASE):
        self.key_id = (key_id or "").strip()
        self.key_secret = (key_secret or "").strip()
        self.timeout = int(timeout or DEFAULT_TIMEOUT_SECONDS)
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls) -> "RazorpayGateway":
        payments = getattr(settings, "PAYMENTS", {}) or {}
        cfg = payments.get("RAZORPAY") or {}
        return cls(
            key_id=cfg.get("KEY_ID", ""),
            key_secret=cfg.get("KEY_SECRET", ""),
            timeout=cfg.get("TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        )

    # =====================================================
    # HTTP
    # =====================================================

    def _auth_header(self) -> str:
        if not self.key_id or not self.key_secret:
            raise UpstreamError(
                "Razorpay credentials are not configured. "
                "Expected settings.PAYMENTS['RAZORPAY']['KEY_ID'] and ['KEY_SECRET']."
            )
        token = base64.b64encode(f"{self.key_id}:{self.key_secret}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    def _request_json(self, method: str, path: str, *, body: dict | None = None) -> dict[str, Any]:
        data = None
        if body is not None:
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")

        req = Request(
            f"{self.base_url}{path}",
            data=data,
            headers={
                "Authorization": self._auth_header(),
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            method=method,
        )

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            raw = e.read().decode("utf-8", errors="replace") if e.fp is not None else ""
            parsed = _parse_json(raw) or {}
            error = parsed.get("error") or {}
            msg = error.get("description") if isinstance(error, dict) else None
            logger.warning(
                "Razorpay rejected request",
                extra={"path": path, "status": e.code, "detail": msg or _safe_preview(raw)},
            )
            raise UpstreamError(f"Razorpay HTTPError: {e.code} {msg or _safe_preview(raw)}") from e
        except URLError as e:
            logger.warning("Razorpay unreachable", extra={"path": path, "reason": str(e.reason)})
            raise UpstreamError(f"Razorpay URLError: {e.reason}") from e
        except TimeoutError as e:
            logger.warning("Razorpay request timed out", extra={"path": path, "timeout": self.timeout})
            raise UpstreamError("Razorpay request timed out") from e

        parsed = _parse_json(raw)
        if parsed is None:
            raise UpstreamError(f"Razorpay returned non-JSON: {_safe_preview(raw)}")
        return parsed

    # =====================================================
    # CAPABILITY
    # =====================================================

    def create_remote_order(self, amount, currency: str = "INR", metadata: dict | None = None) -> dict:
        metadata = dict(metadata or {})
        receipt = str(metadata.pop("receipt", "") or f"rcpt_{uuid.uuid4().hex[:20]}")

        payload = {
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt[:40],
            "notes": {str(k): str(v) for k, v in metadata.items()},
        }
        parsed = self._request_json("POST", "/orders", body=payload)

        gateway_order_id = parsed.get("id")
        if not gateway_order_id:
            raise UpstreamError("Razorpay order response carried no id")

        return {
            "gateway_order_id": gateway_order_id,
            "amount_paise": parsed.get("amount", payload["amount"]),
            "currency": parsed.get("currency", currency),
            "receipt": parsed.get("receipt", payload["receipt"]),
            "status": parsed.get("status", "created"),
        }

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self.key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str | None) -> bool:
        if not signature or not order_id or not payment_id or not self.key_secret:
            return False
        return hmac.compare_digest(self.expected_signature(order_id, payment_id), str(signature).strip())
