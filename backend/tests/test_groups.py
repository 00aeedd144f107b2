# tests/test_groups.py
"""
Tests for the group registry.

Tests cover:
- Name validation and trimming
- Case-sensitive uniqueness (create and rename)
- Deletion guard on linked active accounts
- Group reads with active account counts
"""

import pytest

from accounting.commands import (
    ErrorCode,
    create_group,
    update_group,
    delete_group,
    delete_account,
)
from accounting.models import AccountGroup, Account
from accounting.queries import get_group, list_groups, count_linked_accounts


@pytest.mark.django_db
class TestCreateGroup:

    def test_create_trims_name(self):
        result = create_group("  Wholesale  ")

        assert result.success
        assert result.data.name == "Wholesale"
        assert AccountGroup.objects.filter(name="Wholesale").exists()

    @pytest.mark.parametrize("name", [None, "", "   ", "A", "x" * 101])
    def test_invalid_names_rejected(self, name):
        result = create_group(name)

        assert not result.success
        assert result.code == ErrorCode.VALIDATION
        assert AccountGroup.objects.count() == 0

    def test_duplicate_name_rejected(self, group):
        result = create_group(group.name)

        assert not result.success
        assert result.code == ErrorCode.DUPLICATE_NAME

    def test_uniqueness_is_case_sensitive(self, group):
        result = create_group(group.name.upper())

        assert result.success


@pytest.mark.django_db
class TestUpdateGroup:

    def test_rename(self, group):
        result = update_group(group.id, "Key Customers")

        assert result.success
        group.refresh_from_db()
        assert group.name == "Key Customers"

    def test_rename_to_own_name_allowed(self, group):
        result = update_group(group.id, group.name)

        assert result.success

    def test_rename_to_other_group_name_rejected(self, group, other_group):
        result = update_group(group.id, other_group.name)

        assert not result.success
        assert result.code == ErrorCode.DUPLICATE_NAME

    def test_missing_group(self, db):
        result = update_group(9999, "Anything")

        assert not result.success
        assert result.code == ErrorCode.NOT_FOUND


@pytest.mark.django_db
class TestDeleteGroup:

    def test_delete_empty_group(self, other_group):
        result = delete_group(other_group.id)

        assert result.success
        assert not AccountGroup.objects.filter(pk=other_group.id).exists()

    def test_delete_blocked_by_active_account(self, group, account):
        result = delete_group(group.id)

        assert not result.success
        assert result.code == ErrorCode.HAS_DEPENDENTS
        assert AccountGroup.objects.filter(pk=group.id).exists()

    def test_delete_allowed_after_account_moved(self, group, other_group, account):
        Account.objects.filter(pk=account.pk).update(group=other_group)

        assert delete_group(group.id).success

    def test_delete_allowed_after_account_soft_deleted(self, group, account):
        assert delete_account(account.id).success

        result = delete_group(group.id)

        assert result.success
        account.refresh_from_db()
        assert account.group_id is None

    def test_delete_missing_group(self, db):
        result = delete_group(9999)

        assert result.code == ErrorCode.NOT_FOUND


@pytest.mark.django_db
class TestGroupQueries:

    def test_list_ordered_by_name_with_counts(self, group, other_group, account, inactive_account):
        Account.objects.filter(pk=inactive_account.pk).update(group=group)

        result = list_groups()

        assert result.success
        assert [g.name for g in result.data] == ["Customers", "Suppliers"]
        assert result.count == 2
        counts = {g.name: g._account_count for g in result.data}
        assert counts == {"Customers": 1, "Suppliers": 0}

    def test_get_missing(self, db):
        assert get_group(1234).code == ErrorCode.NOT_FOUND

    def test_count_linked_accounts(self, group, account):
        result = count_linked_accounts(group.id)

        assert result.success
        assert result.data == {"group_id": group.id, "count": 1}
