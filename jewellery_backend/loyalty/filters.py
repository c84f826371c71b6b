# loyalty/filters.py

import django_filters

from loyalty.models import LedgerEntry


class LedgerEntryFilter(django_filters.FilterSet):
    direction = django_filters.ChoiceFilter(choices=LedgerEntry.DIRECTIONS)
    source = django_filters.ChoiceFilter(choices=LedgerEntry.SOURCES)
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = LedgerEntry
        fields = ["direction", "source", "reference_type"]


class AdminLedgerEntryFilter(LedgerEntryFilter):
    class Meta(LedgerEntryFilter.Meta):
        fields = LedgerEntryFilter.Meta.fields + ["account"]
