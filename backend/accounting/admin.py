# accounting/admin.py
"""
Django admin configuration for ledger models.

Accounts and movements are view-only here. Saving a movement from the
admin would skip the balance adjustment done by the command layer
(accounting/commands.py) and leave the account balance out of step.
Groups carry no balance and can be edited freely.
"""

from django.contrib import admin

from .models import AccountGroup, Account, Movement


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Admin with add/change/delete switched off; use the API instead."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class MovementInline(admin.TabularInline):
    model = Movement
    fields = ["transaction_date", "movement_type", "amount", "reference_number", "status", "is_active"]
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True
    ordering = ["-transaction_date", "-id"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(AccountGroup)
class AccountGroupAdmin(admin.ModelAdmin):
    list_display = ["name", "created_at", "updated_at"]
    search_fields = ["name"]


@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "code", "account_type", "group", "balance", "is_active"]
    list_filter = ["account_type", "is_active", "group"]
    search_fields = ["name", "code", "phone", "email"]
    list_select_related = ["group"]
    inlines = [MovementInline]


@admin.register(Movement)
class MovementAdmin(ReadOnlyModelAdmin):
    list_display = [
        "transaction_date", "account", "movement_type", "amount",
        "payment_method", "status", "reference_number", "is_active",
    ]
    list_filter = ["movement_type", "status", "payment_method", "is_active"]
    search_fields = ["description", "reference_number", "account__name"]
    list_select_related = ["account"]
    date_hierarchy = "transaction_date"
