from .invoice import Invoice
from .invoice_line_item import InvoiceLineItem

__all__ = ["Invoice", "InvoiceLineItem"]
