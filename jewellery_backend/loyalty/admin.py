# loyalty/admin.py

from django.contrib import admin

from loyalty.models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "account", "direction", "points", "balance_after", "source", "created_at")
    list_filter = ("direction", "source", "reference_type")
    search_fields = ("account__email", "reference_id", "description")
    readonly_fields = [f.name for f in LedgerEntry._meta.fields]

    # Entries are append-only; posting goes through loyalty.services.ledger.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
