from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("ledger", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PayoutRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="KES", max_length=8)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("processing", "Processing"), ("rejected", "Rejected"), ("cancelled", "Cancelled"), ("completed", "Completed")], db_index=True, default="pending", max_length=16)),
                ("payout_method", models.CharField(choices=[("bank_transfer", "Bank transfer"), ("mobile_money", "Mobile money"), ("pesapal", "Pesapal")], max_length=32)),
                ("payout_details", models.JSONField(blank=True, default=dict)),
                ("requested_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("admin_notes", models.TextField(blank=True, default="")),
                ("external_reference", models.CharField(blank=True, default="", max_length=128)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("requester", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payout_requests", to=settings.AUTH_USER_MODEL)),
                ("reviewed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reviewed_payouts", to=settings.AUTH_USER_MODEL)),
                ("transaction", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payout_request", to="ledger.transaction")),
            ],
            options={
                "ordering": ["-requested_at"],
            },
        ),
    ]
