from django.apps import AppConfig


class LedgerConfig(AppConfig):
    name = 'apps.ledger'
    label = 'ledger'

    def ready(self):
        from . import signals  # noqa: F401
