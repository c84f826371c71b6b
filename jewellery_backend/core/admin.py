# core/admin.py

from django.contrib import admin

from core.models import AppSetting, SequenceCounter


@admin.register(AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "category", "updated_at")
    list_filter = ("category",)
    search_fields = ("key", "description")


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ("name", "last_value", "updated_at")
    search_fields = ("name",)
    readonly_fields = ("name", "last_value", "updated_at")
