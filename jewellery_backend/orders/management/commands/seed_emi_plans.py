# orders/management/commands/seed_emi_plans.py

from django.core.management.base import BaseCommand

from orders.services.payment_resolver import seed_installment_plans


class Command(BaseCommand):
    help = "Create the standard EMI plans (3-24 months). Existing plans are left alone."

    def handle(self, *args, **options):
        created = seed_installment_plans()
        self.stdout.write(self.style.SUCCESS(f"EMI plans seeded: {created} created."))
