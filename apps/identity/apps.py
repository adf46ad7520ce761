from django.apps import AppConfig


class IdentityConfig(AppConfig):
    name = 'apps.identity'
    label = 'identity'

    def ready(self):
        from . import signals  # noqa: F401
