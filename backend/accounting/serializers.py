# accounting/serializers.py
"""
Serializers for the ledger API.

Two kinds live here:
1. Input serializers: shape/format validation. Commands run these
   themselves, so calling a command directly (tests, management commands,
   the shell) is validated exactly like an HTTP request.
2. Output serializers: response formatting only.

Business rules (uniqueness, existence, dependency guards, balances) are
NOT checked here; that is the command layer's job.
"""

import re

from django.conf import settings
from rest_framework import serializers

from .filters import MovementFilter
from .models import (
    AccountGroup,
    Account,
    Movement,
    MAX_MOVEMENT_AMOUNT,
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
)


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_FORMATS = ["%Y-%m-%d"]

# Error detail code used by the command layer to report InvalidEmail
INVALID_EMAIL = "invalid_email"


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


# =============================================================================
# Input Serializers
# =============================================================================

class GroupInputSerializer(serializers.Serializer):
    """Validate a group name (create and rename)."""
    name = serializers.CharField(min_length=2, max_length=100)


class AccountInputSerializer(serializers.Serializer):
    """
    Validate account fields for create and update.

    Optional text fields accept null/blank and come out as "". `balance`
    and `account_type` are only present in validated_data when supplied.
    """
    TEXT_FIELDS = ("phone", "email", "address", "tax_number", "tax_office")

    name = serializers.CharField(min_length=2, max_length=255)
    code = serializers.CharField(
        min_length=2, max_length=50, required=False, allow_null=True, allow_blank=True,
    )
    group_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    phone = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    email = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    address = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    tax_number = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    tax_office = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    balance = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        required=False,
    )
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices, required=False)

    def validate_code(self, value):
        return _blank_to_none(value)

    def validate_email(self, value):
        value = (value or "").strip()
        if value and not EMAIL_RE.match(value):
            raise serializers.ValidationError("Invalid email format.", code=INVALID_EMAIL)
        return value

    def validate(self, attrs):
        for field in self.TEXT_FIELDS:
            attrs[field] = (attrs.get(field) or "").strip()
        attrs.setdefault("code", None)
        attrs.setdefault("group_id", None)
        return attrs


class MovementInputSerializer(serializers.Serializer):
    """
    Validate a complete movement.

    Used for both create and update: an update is a full replace, so every
    required field must be sent again.
    """
    account_id = serializers.IntegerField(min_value=1)
    type = serializers.ChoiceField(choices=Movement.MovementType.choices, source="movement_type")
    amount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
    )
    description = serializers.CharField(
        max_length=1000, required=False, allow_null=True, allow_blank=True,
    )
    reference_number = serializers.CharField(
        max_length=100, required=False, allow_null=True, allow_blank=True,
    )
    transaction_date = serializers.DateField(input_formats=DATE_FORMATS)
    due_date = serializers.DateField(input_formats=DATE_FORMATS, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(
        choices=Movement.PaymentMethod.choices, required=False, allow_null=True,
    )
    status = serializers.ChoiceField(
        choices=Movement.Status.choices, required=False, allow_null=True,
    )

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero.")
        if value > MAX_MOVEMENT_AMOUNT:
            raise serializers.ValidationError(
                f"Amount must not exceed {MAX_MOVEMENT_AMOUNT:,}."
            )
        return value

    def validate_reference_number(self, value):
        return _blank_to_none(value)

    def validate(self, attrs):
        attrs["description"] = (attrs.get("description") or "").strip()
        attrs.setdefault("reference_number", None)
        attrs.setdefault("due_date", None)
        attrs["payment_method"] = attrs.get("payment_method") or Movement.PaymentMethod.CASH
        attrs["status"] = attrs.get("status") or Movement.Status.COMPLETED
        return attrs


class MovementFilterSerializer(serializers.Serializer):
    """
    Parse movement listing query parameters into a MovementFilter.

    Unlike a permissive query-string parser, malformed values are
    rejected instead of being silently ignored.
    """
    account_id = serializers.IntegerField(required=False, min_value=1)
    type = serializers.ChoiceField(choices=Movement.MovementType.choices, required=False)
    min_amount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
        required=False, min_value=0,
    )
    max_amount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
        required=False, min_value=0,
    )
    start_date = serializers.DateField(input_formats=DATE_FORMATS, required=False)
    end_date = serializers.DateField(input_formats=DATE_FORMATS, required=False)
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Movement.Status.choices, required=False)
    payment_method = serializers.ChoiceField(choices=Movement.PaymentMethod.choices, required=False)
    limit = serializers.IntegerField(required=False, min_value=1)
    offset = serializers.IntegerField(required=False, min_value=0)

    def validate(self, attrs):
        min_amount = attrs.get("min_amount")
        max_amount = attrs.get("max_amount")
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise serializers.ValidationError("min_amount cannot be greater than max_amount.")

        start_date = attrs.get("start_date")
        end_date = attrs.get("end_date")
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError("start_date cannot be after end_date.")

        max_page = settings.LEDGER_MAX_PAGE_SIZE
        attrs["limit"] = min(attrs.get("limit") or max_page, max_page)
        attrs["search"] = (attrs.get("search") or "").strip()
        return attrs

    def to_filter(self) -> MovementFilter:
        data = dict(self.validated_data)
        data["movement_type"] = data.pop("type", None)
        return MovementFilter(**data)


# =============================================================================
# Output Serializers
# =============================================================================

class AccountGroupSerializer(serializers.ModelSerializer):
    """Group with the number of active accounts linked to it."""
    account_count = serializers.SerializerMethodField()

    class Meta:
        model = AccountGroup
        fields = ["id", "name", "account_count", "created_at", "updated_at"]
        read_only_fields = fields

    def get_account_count(self, obj):
        # Use annotated value if available (from list query), else count
        if hasattr(obj, "_account_count"):
            return obj._account_count
        return obj.accounts.filter(is_active=True).count()


class AccountSerializer(serializers.ModelSerializer):
    group_id = serializers.IntegerField(read_only=True, allow_null=True)
    group_name = serializers.CharField(source="group.name", read_only=True, default=None)

    class Meta:
        model = Account
        fields = [
            "id", "name", "code", "group_id", "group_name",
            "phone", "email", "address", "tax_number", "tax_office",
            "balance", "account_type", "is_active",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class MovementSerializer(serializers.ModelSerializer):
    account_id = serializers.IntegerField(read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)
    account_code = serializers.CharField(source="account.code", read_only=True, default=None)
    type = serializers.CharField(source="movement_type", read_only=True)

    class Meta:
        model = Movement
        fields = [
            "id", "account_id", "account_name", "account_code",
            "type", "amount", "description", "reference_number",
            "transaction_date", "due_date", "payment_method", "status",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class RecalculateSerializer(serializers.Serializer):
    dry_run = serializers.BooleanField(default=False)
