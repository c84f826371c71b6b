# referrals/admin.py

from django.contrib import admin

from referrals.models import Referral


@admin.register(Referral)
class ReferralAdmin(admin.ModelAdmin):
    list_display = ("code", "referrer", "referee", "status", "reward_amount", "reward_credited_at", "created_at")
    list_filter = ("status", "purchase_type")
    search_fields = ("code", "referrer__email", "referee__email")
    readonly_fields = ("ledger_entry", "reward_credited_at", "created_at", "updated_at")
