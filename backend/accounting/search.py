# accounting/search.py
"""
Case-insensitive substring search that also folds non-ASCII letters.

SQLite's LIKE and LOWER() only fold ASCII, so "şahin" would never match
"Şahin Öztürk". Both the column and the term are lowercased: through
LOWER() on PostgreSQL/MySQL, and through Python's str.lower registered
as an SQL function on each new SQLite connection.

Usage:
    from accounting.search import folded_search

    folded_search(Account.objects.all(), ("name", "code"), "şahin")
"""

from django.db.models import Q
from django.db.models.functions import Lower


SQLITE_LOWER = "ledger_unicode_lower"


def _lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(sender, connection, **kwargs):
    """connection_created receiver (wired in AccountingConfig.ready)."""
    if connection.vendor == "sqlite":
        connection.connection.create_function(SQLITE_LOWER, 1, _lower, deterministic=True)


class UnicodeLower(Lower):
    """LOWER() that folds every script, SQLite included."""

    def as_sqlite(self, compiler, connection, **extra_context):
        return super().as_sql(compiler, connection, function=SQLITE_LOWER, **extra_context)


def folded_search(queryset, fields, term: str):
    """Rows where any of `fields` contains `term`, ignoring case."""
    needle = term.lower()
    aliases = {f"_{field}_lower": UnicodeLower(field) for field in fields}
    condition = Q()
    for alias in aliases:
        condition |= Q(**{f"{alias}__contains": needle})
    return queryset.alias(**aliases).filter(condition)
