from celery import shared_task
import logging

from .services import expire_finished

logger = logging.getLogger(__name__)


@shared_task
def expire_finished_subscriptions():
    """Periodic task: close package subscriptions whose end date has passed."""
    count = expire_finished()
    logger.info(f"expire_finished_subscriptions: {count} subscriptions expired")
    return count
