# accounting/urls.py
"""
URL configuration for the ledger API (mounted under /api/).

Endpoints:
- /groups/ - Account groups CRUD
- /accounts/ - Accounts CRUD, search, export, by type, by group
- /movements/ - Movements CRUD, filter, summary, export, by account
- /balances/ - Balance drift report and repair
"""

from django.urls import path

from .views import (
    # Group views
    GroupListCreateView,
    GroupDetailView,
    GroupAccountCountView,
    # Account views
    AccountListCreateView,
    AccountSearchView,
    AccountExportView,
    AccountByTypeView,
    AccountByGroupView,
    AccountDetailView,
    # Movement views
    MovementListCreateView,
    MovementFilterView,
    MovementSummaryView,
    MovementExportView,
    MovementByAccountView,
    MovementDetailView,
    # Balance repair views
    BalanceDriftView,
    RecalculateAllBalancesView,
    RecalculateAccountBalanceView,
)

app_name = "accounting"

urlpatterns = [
    # ==========================================================================
    # Groups
    # ==========================================================================
    path("groups/", GroupListCreateView.as_view(), name="group-list-create"),
    path("groups/<int:pk>/", GroupDetailView.as_view(), name="group-detail"),
    path(
        "groups/<int:pk>/accounts/count/",
        GroupAccountCountView.as_view(),
        name="group-account-count",
    ),

    # ==========================================================================
    # Accounts
    # ==========================================================================
    path("accounts/", AccountListCreateView.as_view(), name="account-list-create"),
    path("accounts/search/", AccountSearchView.as_view(), name="account-search"),
    path("accounts/export/", AccountExportView.as_view(), name="account-export"),
    path(
        "accounts/type/<str:account_type>/",
        AccountByTypeView.as_view(),
        name="account-by-type",
    ),
    path(
        "accounts/group/<int:group_id>/",
        AccountByGroupView.as_view(),
        name="account-by-group",
    ),
    path("accounts/<int:pk>/", AccountDetailView.as_view(), name="account-detail"),

    # ==========================================================================
    # Movements
    # ==========================================================================
    path("movements/", MovementListCreateView.as_view(), name="movement-list-create"),
    path("movements/filter/", MovementFilterView.as_view(), name="movement-filter"),
    path("movements/summary/", MovementSummaryView.as_view(), name="movement-summary"),
    path("movements/export/", MovementExportView.as_view(), name="movement-export"),
    path(
        "movements/account/<int:account_id>/",
        MovementByAccountView.as_view(),
        name="movement-by-account",
    ),
    path("movements/<int:pk>/", MovementDetailView.as_view(), name="movement-detail"),

    # ==========================================================================
    # Balance repair
    # ==========================================================================
    path("balances/drift/", BalanceDriftView.as_view(), name="balance-drift"),
    path(
        "balances/recalculate/",
        RecalculateAllBalancesView.as_view(),
        name="balance-recalculate-all",
    ),
    path(
        "balances/recalculate/<int:pk>/",
        RecalculateAccountBalanceView.as_view(),
        name="balance-recalculate-account",
    ),
]
