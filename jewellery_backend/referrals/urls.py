# referrals/urls.py

from django.urls import path

from referrals.views import (
    AdminReferralListView,
    ApplyReferralView,
    ReferralCodeView,
    ReferralHistoryView,
    ReferralStatsView,
    ValidateReferralView,
)

app_name = "referrals"

urlpatterns = [
    path("code/", ReferralCodeView.as_view(), name="code"),
    path("apply/", ApplyReferralView.as_view(), name="apply"),
    path("validate/<str:code>/", ValidateReferralView.as_view(), name="validate"),
    path("history/", ReferralHistoryView.as_view(), name="history"),
    path("stats/", ReferralStatsView.as_view(), name="stats"),
    path("all/", AdminReferralListView.as_view(), name="all"),
]
