"""
======================================================
PATH: memberships/migrations/0002_packagepurchase_loyalty_points_shortfall.py
======================================================
MIGRATION: ADD PackagePurchase.loyalty_points_shortfall
"""

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("memberships", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="packagepurchase",
            name="loyalty_points_shortfall",
            field=models.PositiveIntegerField(default=0),
        ),
    ]
