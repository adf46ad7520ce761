from celery import shared_task
import logging

from .story_service import deactivate_expired

logger = logging.getLogger(__name__)


@shared_task
def deactivate_expired_stories():
    """Periodic task: hide stories older than 24 hours."""
    count = deactivate_expired()
    logger.info(f"deactivate_expired_stories: {count} stories deactivated")
    return count
