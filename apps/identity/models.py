import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser


class UserRole(models.TextChoices):
    GUEST = 'GUEST', 'Guest'
    USER = 'USER', 'User'
    CREATOR = 'CREATOR', 'Creator'
    ADMIN = 'ADMIN', 'Administrator'


class User(AbstractUser):
    """
    Platform account. Creators are regular users with a creator profile
    (see apps.creators) and the CREATOR role.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.USER
    )
    phone = models.CharField(max_length=20, blank=True)
    avatar = models.URLField(max_length=500, blank=True)
    bio = models.TextField(blank=True)

    # Presence
    is_online = models.BooleanField(default=False)
    last_seen = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['username']

    def __str__(self):
        return self.email or self.username

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username
