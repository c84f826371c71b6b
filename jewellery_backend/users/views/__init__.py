from .auth import LoginView, RegisterView
from .me import MeView
from .payment_settings import BulkPaymentSettingsView, CustomerPaymentSettingsView

__all__ = [
    "RegisterView",
    "LoginView",
    "MeView",
    "CustomerPaymentSettingsView",
    "BulkPaymentSettingsView",
]
