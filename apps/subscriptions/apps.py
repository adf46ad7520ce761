from django.apps import AppConfig


class SubscriptionsConfig(AppConfig):
    name = 'apps.subscriptions'
    label = 'subscriptions'
