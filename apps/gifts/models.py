import uuid
from django.db import models


class GiftRarity(models.TextChoices):
    COMMON = 'COMMON', 'Common'
    RARE = 'RARE', 'Rare'
    EPIC = 'EPIC', 'Epic'
    LEGENDARY = 'LEGENDARY', 'Legendary'


class Gift(models.Model):
    """Virtual gift priced in wallet tokens."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    animation_url = models.URLField(max_length=500, blank=True)
    price = models.PositiveIntegerField(help_text="Price in tokens")
    category = models.CharField(max_length=50, blank=True, db_index=True)
    rarity = models.CharField(max_length=10, choices=GiftRarity.choices, default=GiftRarity.COMMON)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.price} tokens)"


class GiftTransaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender_id = models.UUIDField(db_index=True)
    recipient_id = models.UUIDField(db_index=True)
    gift_id = models.UUIDField(db_index=True)
    quantity = models.PositiveIntegerField(default=1)
    total_tokens = models.PositiveIntegerField()
    message = models.CharField(max_length=500, blank=True)
    is_anonymous = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
