import uuid
from decimal import Decimal
from django.db import models


class Creator(models.Model):
    """
    Creator profile attached to a user account.
    A user has at most one profile.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(unique=True, db_index=True)

    stage_name = models.CharField(max_length=100)
    title_bio = models.CharField(max_length=255, blank=True)
    bio = models.TextField(blank=True)
    bio_thumbnail = models.URLField(max_length=500, blank=True)
    service = models.CharField(max_length=255, blank=True, help_text="What the creator offers")
    tags = models.JSONField(default=list, blank=True)
    specialties = models.JSONField(default=list, blank=True)

    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    total_ratings = models.PositiveIntegerField(default=0)
    is_verified = models.BooleanField(default=False)
    is_live = models.BooleanField(default=False)
    subscription_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-rating', '-total_ratings']
        verbose_name = "Creator"
        verbose_name_plural = "Creators"

    def __str__(self):
        return self.stage_name
