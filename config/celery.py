"""
Celery configuration for the Streamhub API.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat Schedule
app.conf.beat_schedule = {
    'expire-finished-subscriptions': {
        'task': 'apps.subscriptions.tasks.expire_finished_subscriptions',
        'schedule': crontab(minute='*/15'),
    },
    'deactivate-expired-stories': {
        'task': 'apps.social.tasks.deactivate_expired_stories',
        'schedule': crontab(minute='*/30'),
    },
}
