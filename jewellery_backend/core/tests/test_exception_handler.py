# core/tests/test_exception_handler.py

from django.test import SimpleTestCase
from rest_framework.exceptions import PermissionDenied

from core.api.exception_handler import engine_exception_handler
from core.exceptions import ConflictError, InsufficientBalanceError, NotFoundError, UpstreamError


class EngineExceptionHandlerTests(SimpleTestCase):
    """
    GUARANTEES:
    - engine errors map to their status with detail / field / entity_id
    - other exceptions fall through to DRF's handler
    """

    def test_conflict(self):
        res = engine_exception_handler(ConflictError("Voucher exhausted", field="code", entity_id="FLAT500"), {})
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data, {"detail": "Voucher exhausted", "field": "code", "entity_id": "FLAT500"})

    def test_defaults(self):
        res = engine_exception_handler(NotFoundError(), {})
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data, {"detail": "Not found."})

        self.assertEqual(engine_exception_handler(InsufficientBalanceError(), {}).status_code, 400)
        self.assertEqual(engine_exception_handler(UpstreamError("timeout"), {}).status_code, 502)

    def test_drf_exceptions_pass_through(self):
        res = engine_exception_handler(PermissionDenied(), {})
        self.assertEqual(res.status_code, 403)
