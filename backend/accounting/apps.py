# accounting/apps.py
"""Accounting app configuration."""

from django.apps import AppConfig
from django.db.backends.signals import connection_created


class AccountingConfig(AppConfig):
    """Groups, accounts and the movement ledger."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Ledger"

    def ready(self):
        from .search import register_sqlite_functions

        connection_created.connect(
            register_sqlite_functions,
            dispatch_uid="accounting.register_sqlite_functions",
        )
