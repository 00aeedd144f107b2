# accounting/balances.py
"""
Balance repair.

Account.balance is a cache. The source of truth is the signed sum of the
account's active movements, so a balance can always be rebuilt from the
movement history. Drift only appears after an administrative override
or a write made outside the command layer; it is reported and corrected
here, never compensated silently.

Usage:
    from accounting.balances import find_balance_drift, recalculate_all_balances

    drift = find_balance_drift()              # report only
    result = recalculate_all_balances()       # fix every drifted account
    result = recalculate_all_balances(dry_run=True)
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Case, DecimalField, F, Sum, Value, When
from django.utils import timezone

from accounting.commands import CommandResult, ErrorCode, storage_guard
from accounting.models import (
    Account,
    Movement,
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

MONEY_FIELD = DecimalField(max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)

POSITIVE_TYPES = [
    movement_type
    for movement_type, direction in Movement.DIRECTION.items()
    if direction > 0
]

# Amount with the sign its movement type applies to the balance
SIGNED_AMOUNT = Case(
    When(movement_type__in=POSITIVE_TYPES, then=F("amount")),
    default=F("amount") * Value(-1),
    output_field=MONEY_FIELD,
)


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def _signed_totals(account_ids=None) -> dict:
    """account_id -> signed sum of its active movements."""
    movements = Movement.objects.active()
    if account_ids is not None:
        movements = movements.filter(account_id__in=account_ids)
    rows = (
        movements.order_by()
        .values("account_id")
        .annotate(total=Sum(SIGNED_AMOUNT))
        .values_list("account_id", "total")
    )
    return {account_id: _money(total) for account_id, total in rows}


def compute_account_balance(account) -> Decimal:
    """Signed sum of the account's active movements."""
    account_id = getattr(account, "pk", account)
    return _signed_totals([account_id]).get(account_id, Decimal("0.00"))


def _report(account, computed) -> dict:
    stored = _money(account.balance)
    return {
        "account_id": account.id,
        "account_name": account.name,
        "stored": stored,
        "computed": computed,
        "difference": stored - computed,
    }


def find_balance_drift() -> list[dict]:
    """
    Every active account whose stored balance differs from its movements.

    `difference` is stored minus computed.
    """
    totals = _signed_totals()
    drift = []
    for account in Account.objects.active().order_by("id"):
        computed = totals.get(account.id, Decimal("0.00"))
        if _money(account.balance) != computed:
            drift.append(_report(account, computed))

    if drift:
        logger.warning("Balance drift detected", extra={"drifted_accounts": len(drift)})
    return drift


@storage_guard
def report_balance_drift() -> CommandResult:
    """find_balance_drift() as a CommandResult."""
    drift = find_balance_drift()
    return CommandResult.ok(drift, count=len(drift))


def _correct(account, computed) -> None:
    Account.objects.filter(pk=account.pk).update(
        balance=computed,
        updated_at=timezone.now(),
    )
    logger.warning(
        "Account balance recalculated",
        extra={
            "account_id": account.id,
            "old_balance": str(account.balance),
            "new_balance": str(computed),
        },
    )


@storage_guard
@transaction.atomic
def recalculate_account_balance(account_id: int, dry_run: bool = False) -> CommandResult:
    """
    Rebuild one account's balance from its active movements.

    Returns stored/computed/difference plus `corrected` (False when the
    balance was already right or in dry-run mode).
    """
    account = (
        Account.objects.active()
        .select_for_update()
        .filter(pk=account_id)
        .first()
    )
    if account is None:
        return CommandResult.fail("Account not found.", code=ErrorCode.NOT_FOUND)

    report = _report(account, compute_account_balance(account))
    needs_fix = report["difference"] != 0
    if needs_fix and not dry_run:
        _correct(account, report["computed"])

    report["corrected"] = needs_fix and not dry_run
    report["dry_run"] = dry_run
    return CommandResult.ok(report)


@storage_guard
@transaction.atomic
def recalculate_all_balances(dry_run: bool = False) -> CommandResult:
    """
    Rebuild every active account's balance.

    Returns the drifted accounts (corrected unless dry_run).
    """
    accounts = list(Account.objects.active().select_for_update().order_by("id"))
    totals = _signed_totals()

    drifted = []
    for account in accounts:
        computed = totals.get(account.id, Decimal("0.00"))
        report = _report(account, computed)
        if report["difference"] == 0:
            continue
        if not dry_run:
            _correct(account, computed)
        report["corrected"] = not dry_run
        drifted.append(report)

    logger.info(
        "Balance recalculation finished",
        extra={"checked": len(accounts), "drifted": len(drifted), "dry_run": dry_run},
    )
    return CommandResult.ok(drifted, count=len(drifted))
