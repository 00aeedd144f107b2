# accounting/policies.py
"""
Business policy functions for ledger operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the command's job.

Usage:
    from accounting.policies import can_delete_group

    allowed, reason = can_delete_group(group)
    if not allowed:
        return CommandResult.fail(reason, code=ErrorCode.HAS_DEPENDENTS)

Design Principles:
1. Policies have no side effects
2. Policies return (bool, str) tuples for clear error messages
3. Policies check ONE thing conceptually
4. Commands compose policies as needed
"""

from django.conf import settings
from django.utils.module_loading import import_string

from accounting.models import Account, Movement


DEFAULT_ACCOUNT_DEPENDENCY_COUNTERS = [
    "accounting.policies.count_active_movements",
]


# =============================================================================
# Group Policies
# =============================================================================

def count_linked_accounts(group) -> int:
    """Number of active accounts that belong to the group."""
    return Account.objects.active().filter(group=group).count()


def can_delete_group(group) -> tuple[bool, str]:
    """
    Check if a group can be deleted.

    Rules:
    - No active account may reference it. Inactive accounts are detached
      by the foreign key when the group goes away.
    """
    linked = count_linked_accounts(group)
    if linked:
        return False, (
            f"Cannot delete group '{group.name}': "
            f"{linked} account(s) still belong to it."
        )
    return True, ""


# =============================================================================
# Account Policies
# =============================================================================

def count_active_movements(account) -> int:
    """Default dependency counter: active movements on the account.

    Soft-deleted movements are not counted.
    """
    return Movement.objects.active().filter(account=account).count()


def get_account_dependency_counters():
    """Resolve LEDGER_ACCOUNT_DEPENDENCY_COUNTERS into callables."""
    paths = getattr(
        settings,
        "LEDGER_ACCOUNT_DEPENDENCY_COUNTERS",
        DEFAULT_ACCOUNT_DEPENDENCY_COUNTERS,
    )
    return [import_string(path) for path in paths]


def account_dependency_count(account) -> int:
    """Sum of every configured dependency counter for the account."""
    return sum(counter(account) for counter in get_account_dependency_counters())


def can_delete_account(account) -> tuple[bool, str]:
    """
    Check if an account can be (soft) deleted.

    Rules:
    - Must still be active
    - Nothing may depend on it (see account_dependency_count)

    With the default counters only active movements count: movements
    that were soft-deleted do not block deleting their account.
    """
    if not account.is_active:
        return False, "Account is already deleted."

    dependents = account_dependency_count(account)
    if dependents:
        return False, (
            f"Cannot delete account '{account.name}': "
            f"it has {dependents} active movement(s) or other dependents."
        )
    return True, ""
