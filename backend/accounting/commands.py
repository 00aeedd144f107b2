# accounting/commands.py
"""
Command layer for ledger operations.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and keep balances in step.

Pattern:
1. Load and lock the addressed row (select_for_update)
2. Validate input (input serializers)
3. Apply business policies (can_*)
4. Perform the operation (model changes)
5. Return CommandResult

BALANCE CONSISTENCY
===================
Every movement write adjusts its account balance inside the same
transaction through adjust_account_balance(), which issues a single
`balance = balance + delta` UPDATE. If any step fails, the whole
transaction rolls back, so a movement row and its balance effect are
never persisted separately.
"""

import functools
import logging
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from accounting.models import (
    AccountGroup,
    Account,
    Movement,
    BalanceOperation,
    balance_delta,
)
from accounting.policies import (
    can_delete_group,
    can_delete_account,
)
from accounting.serializers import (
    INVALID_EMAIL,
    GroupInputSerializer,
    AccountInputSerializer,
    MovementInputSerializer,
)

logger = logging.getLogger(__name__)


class ErrorCode:
    VALIDATION = "ValidationError"
    INVALID_EMAIL = "InvalidEmail"
    DUPLICATE_NAME = "DuplicateName"
    DUPLICATE_REFERENCE = "DuplicateReference"
    HAS_DEPENDENTS = "HasDependents"
    GROUP_NOT_FOUND = "GroupNotFound"
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    NOT_FOUND = "NotFound"
    STORAGE = "StorageError"


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = create_account({"name": "Ahmet Yilmaz"})
        if result.success:
            account = result.data
        else:
            error_message, error_code = result.error, result.code

    List reads also fill `count` (rows returned) and, for paged reads,
    `total_count` (rows matching before paging).
    """

    def __init__(
        self,
        success: bool,
        data=None,
        error: str = None,
        code: str = None,
        count: int = None,
        total_count: int = None,
    ):
        self.success = success
        self.data = data
        self.error = error
        self.code = code
        self.count = count
        self.total_count = total_count

    @classmethod
    def ok(cls, data=None, count=None, total_count=None):
        return cls(success=True, data=data, count=count, total_count=total_count)

    @classmethod
    def fail(cls, error: str, code: str = ErrorCode.VALIDATION):
        return cls(success=False, error=error, code=code)

    def __repr__(self):
        if self.success:
            return f"<CommandResult ok data={self.data!r}>"
        return f"<CommandResult fail code={self.code} error={self.error!r}>"


def storage_guard(func):
    """
    Turn database failures into a StorageError result.

    Applied outside @transaction.atomic so the transaction has already
    rolled back by the time the error is caught.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Storage failure in %s", func.__name__)
            return CommandResult.fail(f"Database error: {exc}", code=ErrorCode.STORAGE)
    return wrapper


def validation_failure(errors) -> CommandResult:
    """Build a failed result from serializer errors (first error wins)."""
    for detail in errors.get("email", []):
        if getattr(detail, "code", None) == INVALID_EMAIL:
            return CommandResult.fail(str(detail), code=ErrorCode.INVALID_EMAIL)

    field, details = next(iter(errors.items()))
    detail = details[0] if isinstance(details, list) else details
    if field == "non_field_errors":
        return CommandResult.fail(str(detail))
    return CommandResult.fail(f"{field}: {detail}")


def _validate(serializer_class, data):
    """Run an input serializer. Returns (validated_data, None) or (None, failure)."""
    serializer = serializer_class(data=data if data is not None else {})
    if not serializer.is_valid():
        return None, validation_failure(serializer.errors)
    return dict(serializer.validated_data), None


# =============================================================================
# Group Commands
# =============================================================================

@storage_guard
@transaction.atomic
def create_group(name) -> CommandResult:
    """
    Create a new account group.

    Returns:
        CommandResult with the created AccountGroup or error
    """
    data, failure = _validate(GroupInputSerializer, {"name": name})
    if failure:
        return failure
    name = data["name"]

    if AccountGroup.objects.filter(name=name).exists():
        return CommandResult.fail(
            f"Group name '{name}' already exists.", code=ErrorCode.DUPLICATE_NAME,
        )

    group = AccountGroup.objects.create(name=name)
    logger.info("Group created", extra={"group_id": group.id, "group_name": name})
    return CommandResult.ok(group)


@storage_guard
@transaction.atomic
def update_group(group_id: int, name) -> CommandResult:
    """Rename a group."""
    group = AccountGroup.objects.select_for_update().filter(pk=group_id).first()
    if group is None:
        return CommandResult.fail("Group not found.", code=ErrorCode.NOT_FOUND)

    data, failure = _validate(GroupInputSerializer, {"name": name})
    if failure:
        return failure
    name = data["name"]

    if AccountGroup.objects.filter(name=name).exclude(pk=group.id).exists():
        return CommandResult.fail(
            f"Group name '{name}' already exists.", code=ErrorCode.DUPLICATE_NAME,
        )

    group.name = name
    group.save(update_fields=["name", "updated_at"])
    logger.info("Group updated", extra={"group_id": group.id, "group_name": name})
    return CommandResult.ok(group)


@storage_guard
@transaction.atomic
def delete_group(group_id: int) -> CommandResult:
    """Hard-delete a group that no active account belongs to."""
    group = AccountGroup.objects.select_for_update().filter(pk=group_id).first()
    if group is None:
        return CommandResult.fail("Group not found.", code=ErrorCode.NOT_FOUND)

    allowed, reason = can_delete_group(group)
    if not allowed:
        return CommandResult.fail(reason, code=ErrorCode.HAS_DEPENDENTS)

    group.delete()
    logger.info("Group deleted", extra={"group_id": group_id})
    return CommandResult.ok({"deleted": True, "id": group_id})


# =============================================================================
# Account Commands
# =============================================================================

def _resolve_group(group_id):
    if group_id is None:
        return None, None
    group = AccountGroup.objects.filter(pk=group_id).first()
    if group is None:
        return None, CommandResult.fail(
            f"Group {group_id} not found.", code=ErrorCode.GROUP_NOT_FOUND,
        )
    return group, None


def _check_account_unique(name, code, exclude_id=None):
    """Name and code must be free among active accounts."""
    others = Account.objects.active()
    if exclude_id is not None:
        others = others.exclude(pk=exclude_id)

    if others.filter(name=name).exists():
        return CommandResult.fail(
            f"Account name '{name}' already exists.", code=ErrorCode.DUPLICATE_NAME,
        )
    if code and others.filter(code=code).exists():
        return CommandResult.fail(
            f"Account code '{code}' already exists.", code=ErrorCode.DUPLICATE_NAME,
        )
    return None


@storage_guard
@transaction.atomic
def create_account(data: dict) -> CommandResult:
    """
    Create a new account.

    Args:
        data: name (required), code, group_id, phone, email, address,
              tax_number, tax_office, account_type, balance

    A `balance` in the payload is an opening balance set outside the
    ledger. It is applied as given and logged as a reconciliation bypass.

    Returns:
        CommandResult with the created Account or error
    """
    validated, failure = _validate(AccountInputSerializer, data)
    if failure:
        return failure

    group, failure = _resolve_group(validated["group_id"])
    if failure:
        return failure

    failure = _check_account_unique(validated["name"], validated["code"])
    if failure:
        return failure

    balance = validated.get("balance", Decimal("0.00"))
    account = Account.objects.create(
        name=validated["name"],
        code=validated["code"],
        group=group,
        phone=validated["phone"],
        email=validated["email"],
        address=validated["address"],
        tax_number=validated["tax_number"],
        tax_office=validated["tax_office"],
        balance=balance,
        account_type=validated.get("account_type", Account.AccountType.CUSTOMER),
    )

    if balance:
        logger.warning(
            "Opening balance set outside the ledger",
            extra={"account_id": account.id, "balance": str(balance)},
        )
    logger.info("Account created", extra={"account_id": account.id, "account_name": account.name})
    return CommandResult.ok(account)


@storage_guard
@transaction.atomic
def update_account(account_id: int, data: dict) -> CommandResult:
    """
    Replace an account's descriptive fields.

    Omitted optional text fields are cleared; `account_type` and
    `balance` keep their stored values when omitted. An explicit
    `balance` overrides the cached value and is logged.
    """
    account = (
        Account.objects.active()
        .select_for_update()
        .filter(pk=account_id)
        .first()
    )
    if account is None:
        return CommandResult.fail("Account not found.", code=ErrorCode.NOT_FOUND)

    validated, failure = _validate(AccountInputSerializer, data)
    if failure:
        return failure

    group, failure = _resolve_group(validated["group_id"])
    if failure:
        return failure

    failure = _check_account_unique(validated["name"], validated["code"], exclude_id=account.id)
    if failure:
        return failure

    update_fields = [
        "name", "code", "group", "phone", "email", "address",
        "tax_number", "tax_office", "account_type", "updated_at",
    ]
    account.name = validated["name"]
    account.code = validated["code"]
    account.group = group
    account.phone = validated["phone"]
    account.email = validated["email"]
    account.address = validated["address"]
    account.tax_number = validated["tax_number"]
    account.tax_office = validated["tax_office"]
    account.account_type = validated.get("account_type", account.account_type)

    if "balance" in validated and validated["balance"] != account.balance:
        logger.warning(
            "Account balance overridden outside the ledger",
            extra={
                "account_id": account.id,
                "old_balance": str(account.balance),
                "new_balance": str(validated["balance"]),
            },
        )
        account.balance = validated["balance"]
        update_fields.append("balance")

    account.save(update_fields=update_fields)
    logger.info("Account updated", extra={"account_id": account.id})
    return CommandResult.ok(account)


@storage_guard
@transaction.atomic
def delete_account(account_id: int) -> CommandResult:
    """Soft-delete an account nothing depends on."""
    account = (
        Account.objects.active()
        .select_for_update()
        .filter(pk=account_id)
        .first()
    )
    if account is None:
        return CommandResult.fail("Account not found.", code=ErrorCode.NOT_FOUND)

    allowed, reason = can_delete_account(account)
    if not allowed:
        return CommandResult.fail(reason, code=ErrorCode.HAS_DEPENDENTS)

    account.is_active = False
    account.save(update_fields=["is_active", "updated_at"])
    logger.info("Account deleted", extra={"account_id": account.id})
    return CommandResult.ok({"deleted": True, "id": account.id})


@storage_guard
@transaction.atomic
def adjust_account_balance(account_id: int, delta) -> CommandResult:
    """
    Add `delta` to an active account's balance.

    One UPDATE statement; the balance is never read back and rewritten.
    This is the only balance write used by the movement commands.
    """
    delta = Decimal(delta)
    updated = Account.objects.active().filter(pk=account_id).update(
        balance=F("balance") + delta,
        updated_at=timezone.now(),
    )
    if not updated:
        return CommandResult.fail("Account not found.", code=ErrorCode.NOT_FOUND)

    logger.debug("Balance adjusted", extra={"account_id": account_id, "delta": str(delta)})
    return CommandResult.ok({"account_id": account_id, "delta": delta})


# =============================================================================
# Movement Commands
# =============================================================================

def _lock_active_account(account_id):
    return (
        Account.objects.active()
        .select_for_update()
        .filter(pk=account_id)
        .first()
    )


def _apply_to_balance(account_id, movement_type, amount, operation):
    """
    Apply (or reverse) a movement on its account.

    Returns a failed CommandResult after marking the transaction for
    rollback, or None on success.
    """
    result = adjust_account_balance(
        account_id, balance_delta(movement_type, amount, operation),
    )
    if result.success:
        return None

    transaction.set_rollback(True)
    if result.code == ErrorCode.NOT_FOUND:
        return CommandResult.fail(
            f"Account {account_id} not found or inactive.",
            code=ErrorCode.ACCOUNT_NOT_FOUND,
        )
    return result


def _check_reference_unique(reference_number, exclude_id=None):
    if not reference_number:
        return None
    others = Movement.objects.active().filter(reference_number=reference_number)
    if exclude_id is not None:
        others = others.exclude(pk=exclude_id)
    if others.exists():
        return CommandResult.fail(
            f"Reference number '{reference_number}' is already in use.",
            code=ErrorCode.DUPLICATE_REFERENCE,
        )
    return None


@storage_guard
@transaction.atomic
def create_movement(data: dict) -> CommandResult:
    """
    Record a movement and apply it to its account balance.

    Args:
        data: account_id, type, amount, transaction_date (required);
              description, reference_number, due_date, payment_method,
              status (optional)

    Returns:
        CommandResult with the created Movement or error
    """
    validated, failure = _validate(MovementInputSerializer, data)
    if failure:
        return failure

    account = _lock_active_account(validated.pop("account_id"))
    if account is None:
        return CommandResult.fail(
            "Account not found or inactive.", code=ErrorCode.ACCOUNT_NOT_FOUND,
        )

    failure = _check_reference_unique(validated["reference_number"])
    if failure:
        return failure

    movement = Movement.objects.create(account=account, **validated)

    failure = _apply_to_balance(
        account.id, movement.movement_type, movement.amount, BalanceOperation.ADD,
    )
    if failure:
        return failure

    logger.info(
        "Movement created",
        extra={
            "movement_id": movement.id,
            "account_id": account.id,
            "movement_type": movement.movement_type,
            "amount": str(movement.amount),
        },
    )
    return CommandResult.ok(movement)


@storage_guard
@transaction.atomic
def update_movement(movement_id: int, data: dict) -> CommandResult:
    """
    Replace a movement and move its balance effect.

    The old contribution is reversed on the old account before the new
    one is applied on the (possibly different) new account.
    """
    movement = (
        Movement.objects.active()
        .select_for_update()
        .filter(pk=movement_id)
        .first()
    )
    if movement is None:
        return CommandResult.fail("Movement not found.", code=ErrorCode.NOT_FOUND)

    validated, failure = _validate(MovementInputSerializer, data)
    if failure:
        return failure

    new_account = _lock_active_account(validated.pop("account_id"))
    if new_account is None:
        return CommandResult.fail(
            "Account not found or inactive.", code=ErrorCode.ACCOUNT_NOT_FOUND,
        )

    failure = _check_reference_unique(validated["reference_number"], exclude_id=movement.id)
    if failure:
        return failure

    old_account_id = movement.account_id
    failure = _apply_to_balance(
        old_account_id, movement.movement_type, movement.amount, BalanceOperation.SUBTRACT,
    )
    if failure:
        return failure

    movement.account = new_account
    for field, value in validated.items():
        setattr(movement, field, value)
    movement.save()

    failure = _apply_to_balance(
        new_account.id, movement.movement_type, movement.amount, BalanceOperation.ADD,
    )
    if failure:
        return failure

    logger.info(
        "Movement updated",
        extra={
            "movement_id": movement.id,
            "old_account_id": old_account_id,
            "account_id": new_account.id,
            "amount": str(movement.amount),
        },
    )
    return CommandResult.ok(movement)


@storage_guard
@transaction.atomic
def delete_movement(movement_id: int) -> CommandResult:
    """Soft-delete a movement and reverse its balance effect."""
    movement = (
        Movement.objects.active()
        .select_for_update()
        .filter(pk=movement_id)
        .first()
    )
    if movement is None:
        return CommandResult.fail("Movement not found.", code=ErrorCode.NOT_FOUND)

    movement.is_active = False
    movement.save(update_fields=["is_active", "updated_at"])

    failure = _apply_to_balance(
        movement.account_id, movement.movement_type, movement.amount, BalanceOperation.SUBTRACT,
    )
    if failure:
        return failure

    logger.info(
        "Movement deleted",
        extra={"movement_id": movement.id, "account_id": movement.account_id},
    )
    return CommandResult.ok({"deleted": True, "id": movement.id})
