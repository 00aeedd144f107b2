# accounting/views.py
"""
Thin views that delegate to the commands and queries layers.

Views handle: HTTP parsing, response formatting.
Commands handle: validation, business rules, balance bookkeeping.

CRITICAL: All mutations (create, update, delete) MUST go through commands
so that every movement write keeps its account balance in step. Views
never call .save() on models.
"""

from rest_framework import status
from rest_framework.views import APIView

from . import balances, queries
from .commands import (
    ErrorCode,
    validation_failure,
    # Group commands
    create_group,
    update_group,
    delete_group,
    # Account commands
    create_account,
    update_account,
    delete_account,
    # Movement commands
    create_movement,
    update_movement,
    delete_movement,
)
from .exports import (
    ACCOUNT_COLUMNS,
    MOVEMENT_COLUMNS,
    ExportFormat,
    account_rows,
    create_export_response,
    movement_rows,
)
from .responses import error_response, result_response
from .serializers import (
    AccountGroupSerializer,
    AccountSerializer,
    MovementSerializer,
    MovementFilterSerializer,
    RecalculateSerializer,
)


def _payload(request) -> dict:
    return request.data if isinstance(request.data, dict) else {}


def _invalid(serializer):
    failure = validation_failure(serializer.errors)
    return error_response(failure.error, ErrorCode.VALIDATION)


def _export_format(request):
    export_format = request.query_params.get("format", ExportFormat.EXCEL)
    if export_format not in ExportFormat.CHOICES:
        return None, error_response(
            f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}"
        )
    return export_format, None


# =============================================================================
# Group Views
# =============================================================================

class GroupListCreateView(APIView):
    """
    GET /api/groups/ -> list groups with their active account counts
    POST /api/groups/ -> create group {name}
    """

    def get(self, request):
        return result_response(queries.list_groups(), AccountGroupSerializer)

    def post(self, request):
        result = create_group(_payload(request).get("name"))
        if result.success:
            result = queries.get_group(result.data.id)
        return result_response(
            result,
            AccountGroupSerializer,
            success_status=status.HTTP_201_CREATED,
            message="Group created.",
        )


class GroupDetailView(APIView):
    """
    GET /api/groups/<id>/
    PUT /api/groups/<id>/ -> rename {name}
    DELETE /api/groups/<id>/ -> hard delete (blocked while accounts remain)
    """

    def get(self, request, pk):
        return result_response(queries.get_group(pk), AccountGroupSerializer)

    def put(self, request, pk):
        result = update_group(pk, _payload(request).get("name"))
        if result.success:
            result = queries.get_group(pk)
        return result_response(result, AccountGroupSerializer, message="Group updated.")

    def delete(self, request, pk):
        return result_response(delete_group(pk), message="Group deleted.")


class GroupAccountCountView(APIView):
    """GET /api/groups/<id>/accounts/count/"""

    def get(self, request, pk):
        return result_response(queries.count_linked_accounts(pk))


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/accounts/ -> active accounts ordered by name
    POST /api/accounts/ -> create account
    """

    def get(self, request):
        return result_response(queries.list_accounts(), AccountSerializer)

    def post(self, request):
        result = create_account(_payload(request))
        return result_response(
            result,
            AccountSerializer,
            success_status=status.HTTP_201_CREATED,
            message="Account created.",
        )


class AccountSearchView(APIView):
    """GET /api/accounts/search/?q=term"""

    def get(self, request):
        return result_response(
            queries.search_accounts(request.query_params.get("q")),
            AccountSerializer,
        )


class AccountByTypeView(APIView):
    """GET /api/accounts/type/<account_type>/"""

    def get(self, request, account_type):
        return result_response(queries.list_accounts_by_type(account_type), AccountSerializer)


class AccountByGroupView(APIView):
    """GET /api/accounts/group/<group_id>/"""

    def get(self, request, group_id):
        return result_response(queries.list_accounts_by_group(group_id), AccountSerializer)


class AccountDetailView(APIView):
    """
    GET /api/accounts/<id>/
    PUT /api/accounts/<id>/ -> replace descriptive fields
    DELETE /api/accounts/<id>/ -> soft delete (blocked while movements exist)
    """

    def get(self, request, pk):
        return result_response(queries.get_account(pk), AccountSerializer)

    def put(self, request, pk):
        result = update_account(pk, _payload(request))
        return result_response(result, AccountSerializer, message="Account updated.")

    def delete(self, request, pk):
        return result_response(delete_account(pk), message="Account deleted.")


class AccountExportView(APIView):
    """
    GET /api/accounts/export/ -> export active accounts

    Query params:
        format: xlsx, csv, txt (default: xlsx)
    """

    def get(self, request):
        export_format, failure = _export_format(request)
        if failure:
            return failure

        result = queries.list_accounts()
        if not result.success:
            return error_response(result.error, result.code)

        return create_export_response(
            account_rows(result.data),
            ACCOUNT_COLUMNS,
            export_format,
            filename="accounts",
            title="Accounts",
        )


# =============================================================================
# Movement Views
# =============================================================================

class MovementListCreateView(APIView):
    """
    GET /api/movements/ -> active movements, newest first
    POST /api/movements/ -> record a movement and apply it to the balance
    """

    def get(self, request):
        return result_response(queries.list_movements(), MovementSerializer)

    def post(self, request):
        result = create_movement(_payload(request))
        if result.success:
            result = queries.get_movement(result.data.id)
        return result_response(
            result,
            MovementSerializer,
            success_status=status.HTTP_201_CREATED,
            message="Movement created.",
        )


class MovementFilterView(APIView):
    """
    GET /api/movements/filter/

    Query params: account_id, type, min_amount, max_amount, start_date,
    end_date, search, status, payment_method, limit, offset.
    """

    def get(self, request):
        filter_serializer = MovementFilterSerializer(data=request.query_params)
        if not filter_serializer.is_valid():
            return _invalid(filter_serializer)
        result = queries.filter_movements(filter_serializer.to_filter())
        return result_response(result, MovementSerializer)


class MovementSummaryView(APIView):
    """GET /api/movements/summary/ -> totals per movement type"""

    def get(self, request):
        return result_response(queries.summarize_movements_by_type())


class MovementExportView(APIView):
    """
    GET /api/movements/export/ -> export movements matching the filter

    Accepts the same filters as /filter/ (paging ignored) plus format.
    """

    def get(self, request):
        export_format, failure = _export_format(request)
        if failure:
            return failure

        filter_serializer = MovementFilterSerializer(data=request.query_params)
        if not filter_serializer.is_valid():
            return _invalid(filter_serializer)

        result = queries.movements_for_export(filter_serializer.to_filter())
        if not result.success:
            return error_response(result.error, result.code)

        return create_export_response(
            movement_rows(result.data),
            MOVEMENT_COLUMNS,
            export_format,
            filename="movements",
            title="Movements",
        )


class MovementByAccountView(APIView):
    """GET /api/movements/account/<account_id>/"""

    def get(self, request, account_id):
        return result_response(queries.list_movements_by_account(account_id), MovementSerializer)


class MovementDetailView(APIView):
    """
    GET /api/movements/<id>/
    PUT /api/movements/<id>/ -> full replace, balance effect moved
    DELETE /api/movements/<id>/ -> soft delete, balance effect reversed
    """

    def get(self, request, pk):
        return result_response(queries.get_movement(pk), MovementSerializer)

    def put(self, request, pk):
        result = update_movement(pk, _payload(request))
        if result.success:
            result = queries.get_movement(pk)
        return result_response(result, MovementSerializer, message="Movement updated.")

    def delete(self, request, pk):
        return result_response(delete_movement(pk), message="Movement deleted.")


# =============================================================================
# Balance Repair Views
# =============================================================================

class BalanceDriftView(APIView):
    """GET /api/balances/drift/ -> accounts whose balance disagrees with their movements"""

    def get(self, request):
        return result_response(balances.report_balance_drift())


class RecalculateAllBalancesView(APIView):
    """POST /api/balances/recalculate/ {"dry_run": bool}"""

    def post(self, request):
        options = RecalculateSerializer(data=_payload(request))
        if not options.is_valid():
            return _invalid(options)
        result = balances.recalculate_all_balances(dry_run=options.validated_data["dry_run"])
        return result_response(result)


class RecalculateAccountBalanceView(APIView):
    """POST /api/balances/recalculate/<id>/ {"dry_run": bool}"""

    def post(self, request, pk):
        options = RecalculateSerializer(data=_payload(request))
        if not options.is_valid():
            return _invalid(options)
        result = balances.recalculate_account_balance(
            pk, dry_run=options.validated_data["dry_run"],
        )
        return result_response(result)
