# preferences/views.py
"""
Thin views over preferences.commands.

Responses use the same envelope as the ledger API
(accounting.responses).
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.responses import error_response, result_response

from .commands import (
    get_setting,
    list_settings,
    list_settings_by_category,
    set_setting,
    delete_setting,
    set_settings_bulk,
    initialize_default_settings,
)
from .serializers import SettingSerializer


def _payload(request) -> dict:
    return request.data if isinstance(request.data, dict) else {}


class SettingListView(APIView):
    """GET /api/settings/"""

    def get(self, request):
        return result_response(list_settings(), SettingSerializer)


class SettingDetailView(APIView):
    """
    GET /api/settings/<name>/
    PUT /api/settings/<name>/ -> upsert {setting_value, setting_type?, description?}
    DELETE /api/settings/<name>/
    """

    def get(self, request, name):
        return result_response(get_setting(name), SettingSerializer)

    def put(self, request, name):
        payload = _payload(request)
        result = set_setting(
            name,
            payload.get("setting_value"),
            payload.get("setting_type"),
            payload.get("description"),
        )
        if not result.success:
            return error_response(result.error, result.code)

        created = result.data["created"]
        return Response(
            {
                "success": True,
                "data": SettingSerializer(result.data["setting"]).data,
                "message": "Setting created." if created else "Setting updated.",
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request, name):
        return result_response(delete_setting(name), message="Setting deleted.")


class SettingCategoryView(APIView):
    """GET /api/settings/category/<category>/"""

    def get(self, request, category):
        return result_response(list_settings_by_category(category), SettingSerializer)


class SettingBulkView(APIView):
    """
    POST /api/settings/bulk/ {"settings": [{setting_name, setting_value, ...}, ...]}

    200 when every item was written, 207 when some failed, 400 when all
    failed or the request itself is malformed.
    """

    def post(self, request):
        result = set_settings_bulk(_payload(request).get("settings"))
        if not result.success:
            return error_response(result.error, result.code)

        summary = result.data
        if summary["failed"] == 0:
            http_status = status.HTTP_200_OK
        elif summary["succeeded"] > 0:
            http_status = status.HTTP_207_MULTI_STATUS
        else:
            http_status = status.HTTP_400_BAD_REQUEST

        return Response(
            {
                "success": summary["failed"] == 0,
                "data": summary,
                "message": f"{summary['succeeded']} setting(s) saved, {summary['failed']} failed.",
            },
            status=http_status,
        )


class SettingInitializeView(APIView):
    """POST /api/settings/initialize/ -> write the default settings"""

    def post(self, request):
        result = initialize_default_settings()
        return result_response(
            result,
            success_status=status.HTTP_201_CREATED,
            message="Default settings initialized.",
        )
