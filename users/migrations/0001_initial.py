"""
Initial migration for the users app.

Defines the `UserProfile` model with roles and organizer balances.
"""
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("attendee", "Attendee"), ("organizer", "Organizer"), ("admin", "Admin")], db_index=True, default="attendee", max_length=16)),
                ("full_name", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("organization_name", models.CharField(blank=True, max_length=255)),
                ("total_earnings", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("pending_earnings", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("withdrawn_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
