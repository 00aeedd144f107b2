# accounting/models.py
"""
Ledger models.

Models:
- AccountGroup: Named bucket accounts may belong to
- Account: Counterparty (customer/supplier) with a cached running balance
- Movement: Single financial event against exactly one account

BALANCE OWNERSHIP
=================
Account.balance is a cache of the signed sum of the account's active
movements. It is written by exactly one path during normal operation:
accounting.commands.adjust_account_balance(), called by the movement
commands. Do not call .save() with a new balance from anywhere else; the
administrative override (update_account with an explicit balance) is
logged as a reconciliation bypass and can be undone with
accounting.balances.recalculate_account_balance().

SOFT DELETE
===========
Accounts and movements are never removed; is_active flips to False.
Uniqueness of account name/code and movement reference_number only
applies to active rows (partial unique constraints).
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q


MONEY_MAX_DIGITS = 15
MONEY_DECIMAL_PLACES = 2
MAX_MOVEMENT_AMOUNT = Decimal("999999999.99")


class AccountGroup(models.Model):
    """
    Named group of accounts.

    Groups are a plain reference table: hard-deleted, and only once no
    active account points at them (see policies.can_delete_group).
    """

    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Account Group"
        verbose_name_plural = "Account Groups"

    def __str__(self):
        return self.name


class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Account(models.Model):
    """
    Counterparty tracked by the ledger.

    `balance` is positive when the counterparty has brought in more
    (income/receivable) than it has taken out (expense/payable).
    """

    class AccountType(models.TextChoices):
        CUSTOMER = "customer", "Customer"
        SUPPLIER = "supplier", "Supplier"
        BOTH = "both", "Customer & Supplier"

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, null=True, blank=True)
    group = models.ForeignKey(
        AccountGroup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="accounts",
    )
    phone = models.CharField(max_length=20, blank=True, default="")
    email = models.CharField(max_length=100, blank=True, default="")
    address = models.TextField(blank=True, default="")
    tax_number = models.CharField(max_length=20, blank=True, default="")
    tax_office = models.CharField(max_length=100, blank=True, default="")
    balance = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        default=Decimal("0.00"),
    )
    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        default=AccountType.CUSTOMER,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name"],
                condition=Q(is_active=True),
                name="uniq_active_account_name",
            ),
            models.UniqueConstraint(
                fields=["code"],
                condition=Q(is_active=True) & Q(code__isnull=False),
                name="uniq_active_account_code",
            ),
        ]
        indexes = [
            models.Index(fields=["account_type", "is_active"], name="account_type_active_idx"),
        ]

    def __str__(self):
        if self.code:
            return f"{self.code} - {self.name}"
        return self.name


class Movement(models.Model):
    """
    A financial movement against one account.

    `amount` is always positive. The sign applied to the account balance
    comes from `movement_type` (see DIRECTION).
    """

    class MovementType(models.TextChoices):
        INCOME = "income", "Income"
        EXPENSE = "expense", "Expense"
        RECEIVABLE = "receivable", "Receivable"
        PAYABLE = "payable", "Payable"

    class PaymentMethod(models.TextChoices):
        CASH = "cash", "Cash"
        BANK_TRANSFER = "bank_transfer", "Bank Transfer"
        CHECK = "check", "Check"
        CREDIT_CARD = "credit_card", "Credit Card"

    class Status(models.TextChoices):
        COMPLETED = "completed", "Completed"
        PENDING = "pending", "Pending"
        CANCELLED = "cancelled", "Cancelled"

    DIRECTION = {
        MovementType.INCOME: 1,
        MovementType.RECEIVABLE: 1,
        MovementType.EXPENSE: -1,
        MovementType.PAYABLE: -1,
    }

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="movements",
    )
    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    amount = models.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
    )
    description = models.TextField(blank=True, default="")
    reference_number = models.CharField(max_length=100, null=True, blank=True)
    transaction_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.COMPLETED,
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["-transaction_date", "-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="movement_amount_positive",
            ),
            models.UniqueConstraint(
                fields=["reference_number"],
                condition=Q(is_active=True) & Q(reference_number__isnull=False),
                name="uniq_active_movement_reference",
            ),
        ]
        indexes = [
            models.Index(fields=["account", "is_active"], name="movement_account_active_idx"),
            models.Index(fields=["transaction_date"], name="movement_txn_date_idx"),
        ]

    def __str__(self):
        return f"{self.movement_type} {self.amount} -> {self.account_id}"

    @property
    def direction(self) -> int:
        return self.DIRECTION[self.movement_type]

    @property
    def signed_amount(self) -> Decimal:
        return self.direction * self.amount


class BalanceOperation(models.TextChoices):
    ADD = "add", "Apply"
    SUBTRACT = "subtract", "Reverse"


def balance_delta(movement_type: str, amount: Decimal, operation: str) -> Decimal:
    """
    Signed change a movement makes to its account's balance.

    ADD applies the movement; SUBTRACT reverses it.
    """
    direction = Movement.DIRECTION[movement_type]
    if operation == BalanceOperation.SUBTRACT:
        direction = -direction
    return direction * Decimal(amount)
