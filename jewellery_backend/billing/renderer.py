# billing/renderer.py

"""
Invoice document rendering.

A renderer turns the invoice document (a plain dict, see
billing.services.invoice_generator.invoice_document) into bytes.
Renderers that upload the result elsewhere may instead return a URL string;
render_invoice() stores it on the invoice as document_url.
"""

from __future__ import annotations

import json
from typing import Protocol, Union

from django.core.serializers.json import DjangoJSONEncoder


class InvoiceRenderer(Protocol):
    content_type: str
    extension: str

    def render(self, document: dict) -> Union[bytes, str]:
        ...


class JsonInvoiceRenderer:
    content_type = "application/json"
    extension = "json"

    def __init__(self, *, indent: int | None = 2):
        self.indent = indent

    def render(self, document: dict) -> bytes:
        return json.dumps(document, cls=DjangoJSONEncoder, indent=self.indent).encode("utf-8")
