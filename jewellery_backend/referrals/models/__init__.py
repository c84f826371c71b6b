from .referral import Referral

__all__ = ["Referral"]
