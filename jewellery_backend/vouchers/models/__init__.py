from .voucher import Voucher
from .voucher_claim import VoucherClaim

__all__ = ["Voucher", "VoucherClaim"]
