# tests/helpers.py
"""Assertion helpers shared by the ledger tests."""

from decimal import Decimal

from accounting.models import Account, Movement


def balance_of(account) -> Decimal:
    """Stored balance, read fresh from the database."""
    return Account.objects.get(pk=account.pk).balance


def ledger_sum(account) -> Decimal:
    """Signed sum of the account's active movements."""
    total = Decimal("0.00")
    for movement in Movement.objects.active().filter(account_id=account.pk):
        total += movement.signed_amount
    return total


def movement_payload(account, movement_type="income", amount="100.00", **extra) -> dict:
    data = {
        "account_id": account.pk,
        "type": movement_type,
        "amount": amount,
        "transaction_date": "2024-01-15",
    }
    data.update(extra)
    return data
