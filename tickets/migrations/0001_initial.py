from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("events", "0001_initial"),
        ("payments", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_tracking_id", models.CharField(max_length=128, unique=True)),
                ("code", models.CharField(max_length=64, unique=True)),
                ("qr_payload", models.CharField(max_length=512, unique=True)),
                ("qr_code_url", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("valid", "Valid"), ("used", "Used"), ("cancelled", "Cancelled"), ("refunded", "Refunded")], db_index=True, default="valid", max_length=16)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(default="KES", max_length=8)),
                ("purchased_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("checked_in_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to="events.event")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to=settings.AUTH_USER_MODEL)),
                ("payment_intent", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="ticket", to="payments.paymentintent")),
            ],
            options={
                "ordering": ["-purchased_at"],
            },
        ),
    ]
