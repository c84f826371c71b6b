# payments/urls.py

from django.urls import path

from payments.views import InitiateOrderPaymentView, OrderPaymentAttemptsView, VerifyOrderPaymentView

app_name = "payments"

urlpatterns = [
    path("orders/<uuid:pk>/initiate/", InitiateOrderPaymentView.as_view(), name="initiate"),
    path("orders/<uuid:pk>/attempts/", OrderPaymentAttemptsView.as_view(), name="attempts"),
    path("verify/", VerifyOrderPaymentView.as_view(), name="verify"),
]
