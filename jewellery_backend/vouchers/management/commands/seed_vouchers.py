# vouchers/management/commands/seed_vouchers.py

from django.core.management.base import BaseCommand

from vouchers.services.voucher_evaluator import seed_default_vouchers


class Command(BaseCommand):
    help = "Create the standard voucher codes (existing codes are left alone)."

    def handle(self, *args, **options):
        created = seed_default_vouchers()
        self.stdout.write(self.style.SUCCESS(f"Vouchers seeded: {created} created."))
