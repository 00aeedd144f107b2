# tests/conftest.py
"""
Pytest fixtures for the ledger tests.

Accounts and groups are created straight through the ORM so each test
starts from a known balance; movements always go through
accounting.commands.create_movement so their balance effect is applied.
"""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounting.commands import create_movement
from accounting.models import AccountGroup, Account

from .helpers import movement_payload


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def group(db):
    return AccountGroup.objects.create(name="Customers")


@pytest.fixture
def other_group(db):
    return AccountGroup.objects.create(name="Suppliers")


@pytest.fixture
def account(db, group):
    """Active customer account with a zero balance."""
    return Account.objects.create(
        name="Ahmet Yilmaz",
        code="C001",
        group=group,
        email="ahmet@example.com",
        phone="05551234567",
    )


@pytest.fixture
def second_account(db):
    return Account.objects.create(
        name="Mehmet Demir",
        code="S001",
        account_type=Account.AccountType.SUPPLIER,
    )


@pytest.fixture
def funded_account(db):
    """Account holding an opening balance of 1000.00 and no movements."""
    return Account.objects.create(name="Ayse Kaya", balance=Decimal("1000.00"))


@pytest.fixture
def inactive_account(db):
    return Account.objects.create(name="Closed Account", code="X001", is_active=False)


@pytest.fixture
def make_movement(db):
    """Create a movement through the command layer and return it."""

    def _make(account, movement_type="income", amount="100.00", **extra):
        result = create_movement(movement_payload(account, movement_type, amount, **extra))
        assert result.success, result.error
        return result.data

    return _make
