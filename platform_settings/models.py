"""
Key/value platform configuration editable at runtime by admins.

Values are stored as JSON so a setting can hold a number, a string or a
small structure.  Read and write through ``platform_settings.store``
rather than the model so callers always supply a default.
"""
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class Setting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(encoder=DjangoJSONEncoder)
    description = models.CharField(max_length=255, blank=True, default="")
    is_system = models.BooleanField(default=False)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key}={self.value!r}"
