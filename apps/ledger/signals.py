from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from .services import get_or_create_wallet

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_wallet_for_new_user(sender, instance, created, **kwargs):
    """
    Every account gets an empty wallet on creation.
    """
    if not created:
        return
    get_or_create_wallet(instance.id)
    logger.debug(f"Signal: wallet ready for user {instance.id}")
