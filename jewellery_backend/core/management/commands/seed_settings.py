# core/management/commands/seed_settings.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from core.services.settings_store import seed_default_settings


class Command(BaseCommand):
    help = "Create missing AppSetting rows from defaults (idempotent)."

    def handle(self, *args, **options):
        created = seed_default_settings()
        self.stdout.write(self.style.SUCCESS(f"Settings seeded: {created} created."))
