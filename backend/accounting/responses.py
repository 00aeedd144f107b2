# accounting/responses.py
"""
Response envelope shared by every API view.

Success: {"success": true, "data": ..., "count"?, "totalCount"?, "message"?}
Failure: {"success": false, "error": "...", "code": "..."}
"""

import logging

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from accounting.commands import ErrorCode

logger = logging.getLogger(__name__)


STATUS_BY_CODE = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_NAME: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_REFERENCE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.HAS_DEPENDENTS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.GROUP_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ACCOUNT_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

GENERIC_STORAGE_ERROR = "A database error occurred."


def error_response(error: str, code: str = ErrorCode.VALIDATION) -> Response:
    if code == ErrorCode.STORAGE and not settings.DEBUG:
        error = GENERIC_STORAGE_ERROR
    return Response(
        {"success": False, "error": error, "code": code},
        status=STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST),
    )


def result_response(
    result,
    serializer_class=None,
    success_status: int = status.HTTP_200_OK,
    message: str = None,
) -> Response:
    """
    Translate a CommandResult into an HTTP response.

    When serializer_class is given, result.data is passed through it
    (many=True for lists).
    """
    if not result.success:
        return error_response(result.error, result.code)

    data = result.data
    if serializer_class is not None:
        data = serializer_class(data, many=isinstance(data, list)).data

    body = {"success": True, "data": data}
    if result.count is not None:
        body["count"] = result.count
    if result.total_count is not None:
        body["totalCount"] = result.total_count
    if message:
        body["message"] = message
    return Response(body, status=success_status)


def envelope_exception_handler(exc, context):
    """
    DRF exception handler that keeps framework errors (malformed JSON,
    unsupported method) in the same envelope. A DatabaseError that got
    past the command layer is reported as StorageError.
    """
    if isinstance(exc, DatabaseError):
        logger.exception("Unhandled storage failure")
        return error_response(f"Database error: {exc}", ErrorCode.STORAGE)

    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = response.data.get("detail") if isinstance(response.data, dict) else None
    code = ErrorCode.NOT_FOUND if response.status_code == 404 else ErrorCode.VALIDATION
    response.data = {
        "success": False,
        "error": str(detail) if detail is not None else str(exc),
        "code": code,
    }
    return response
