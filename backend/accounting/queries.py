# accounting/queries.py
"""
Read operations for groups, accounts and movements.

Reads return CommandResult like the write commands so views handle both
the same way. Lists carry `count`; paged lists also carry `total_count`.
Database failures come back as StorageError, as they do for writes.
"""

from django.db.models import Avg, Count, Max, Min, Q, Sum

from accounting import policies
from accounting.commands import CommandResult, ErrorCode, storage_guard
from accounting.filters import MovementFilter
from accounting.models import AccountGroup, Account, Movement
from accounting.search import folded_search


SEARCH_MIN_LENGTH = 2


def _listed(rows) -> CommandResult:
    rows = list(rows)
    return CommandResult.ok(rows, count=len(rows))


# =============================================================================
# Groups
# =============================================================================

def groups_with_counts():
    return AccountGroup.objects.annotate(
        _account_count=Count("accounts", filter=Q(accounts__is_active=True)),
    ).order_by("name")


@storage_guard
def get_group(group_id: int) -> CommandResult:
    group = groups_with_counts().filter(pk=group_id).first()
    if group is None:
        return CommandResult.fail("Group not found.", code=ErrorCode.NOT_FOUND)
    return CommandResult.ok(group)


@storage_guard
def list_groups() -> CommandResult:
    return _listed(groups_with_counts())


@storage_guard
def count_linked_accounts(group_id: int) -> CommandResult:
    """Active accounts in a group."""
    group = AccountGroup.objects.filter(pk=group_id).first()
    if group is None:
        return CommandResult.fail("Group not found.", code=ErrorCode.NOT_FOUND)
    return CommandResult.ok({"group_id": group.id, "count": policies.count_linked_accounts(group)})


# =============================================================================
# Accounts
# =============================================================================

def active_accounts():
    return Account.objects.active().select_related("group").order_by("name")


@storage_guard
def get_account(account_id: int) -> CommandResult:
    account = active_accounts().filter(pk=account_id).first()
    if account is None:
        return CommandResult.fail("Account not found.", code=ErrorCode.NOT_FOUND)
    return CommandResult.ok(account)


@storage_guard
def list_accounts() -> CommandResult:
    return _listed(active_accounts())


@storage_guard
def list_accounts_by_type(account_type: str) -> CommandResult:
    if account_type not in Account.AccountType.values:
        return CommandResult.fail(
            f"Invalid account type '{account_type}'. "
            f"Expected one of: {', '.join(Account.AccountType.values)}."
        )
    return _listed(active_accounts().filter(account_type=account_type))


@storage_guard
def list_accounts_by_group(group_id: int) -> CommandResult:
    if not AccountGroup.objects.filter(pk=group_id).exists():
        return CommandResult.fail("Group not found.", code=ErrorCode.NOT_FOUND)
    return _listed(active_accounts().filter(group_id=group_id))


@storage_guard
def search_accounts(term) -> CommandResult:
    """Case-insensitive (Unicode) substring search over name, code, phone and email."""
    term = (term or "").strip()
    if len(term) < SEARCH_MIN_LENGTH:
        return CommandResult.fail(
            f"Search term must be at least {SEARCH_MIN_LENGTH} characters."
        )
    return _listed(
        folded_search(active_accounts(), ("name", "code", "phone", "email"), term)
    )


# =============================================================================
# Movements
# =============================================================================

def active_movements():
    return (
        Movement.objects.active()
        .select_related("account")
        .order_by("-transaction_date", "-created_at", "-id")
    )


@storage_guard
def get_movement(movement_id: int) -> CommandResult:
    movement = active_movements().filter(pk=movement_id).first()
    if movement is None:
        return CommandResult.fail("Movement not found.", code=ErrorCode.NOT_FOUND)
    return CommandResult.ok(movement)


@storage_guard
def list_movements() -> CommandResult:
    return _listed(active_movements())


@storage_guard
def list_movements_by_account(account_id: int) -> CommandResult:
    if not Account.objects.active().filter(pk=account_id).exists():
        return CommandResult.fail("Account not found.", code=ErrorCode.NOT_FOUND)
    return _listed(active_movements().filter(account_id=account_id))


@storage_guard
def filter_movements(movement_filter: MovementFilter) -> CommandResult:
    """One page of matching movements plus the unpaged match count."""
    matching = movement_filter.apply(active_movements())
    total_count = matching.count()
    rows = list(movement_filter.paginate(matching))
    return CommandResult.ok(rows, count=len(rows), total_count=total_count)


@storage_guard
def movements_for_export(movement_filter: MovementFilter) -> CommandResult:
    """Every movement matching the filter; paging is ignored."""
    return _listed(movement_filter.apply(active_movements()))


@storage_guard
def summarize_movements_by_type() -> CommandResult:
    rows = (
        Movement.objects.active()
        .values("movement_type")
        .annotate(
            count=Count("id"),
            total=Sum("amount"),
            average=Avg("amount"),
            minimum=Min("amount"),
            maximum=Max("amount"),
        )
        .order_by("-total")
    )
    summary = [
        {
            "type": row["movement_type"],
            "count": row["count"],
            "total_amount": row["total"],
            "average_amount": row["average"],
            "min_amount": row["minimum"],
            "max_amount": row["maximum"],
        }
        for row in rows
    ]
    return CommandResult.ok(summary, count=len(summary))
