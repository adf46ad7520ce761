import uuid
from django.db import models


class SubscriptionStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    CANCELLED = 'CANCELLED', 'Cancelled'
    EXPIRED = 'EXPIRED', 'Expired'


class StreamPackage(models.Model):
    """Streaming plan creators buy with their wallet balance."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    duration = models.PositiveIntegerField(help_text="Length of the plan in days")
    price = models.DecimalField(max_digits=15, decimal_places=2)
    features = models.JSONField(default=list, blank=True)
    max_concurrent_streams = models.PositiveIntegerField(default=1)
    max_stream_duration = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes per stream")
    priority_support = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['price']

    def __str__(self):
        return f"{self.name} ({self.duration}d)"


class CreatorPackageSubscription(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    creator_id = models.UUIDField(db_index=True, help_text="User id of the subscribing creator")
    package_id = models.UUIDField(db_index=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(db_index=True)
    price = models.DecimalField(max_digits=15, decimal_places=2, help_text="Price paid at purchase")
    status = models.CharField(max_length=10, choices=SubscriptionStatus.choices, default=SubscriptionStatus.ACTIVE)
    auto_renew = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['creator_id', 'status']),
        ]
