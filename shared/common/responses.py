# shared/common/responses.py
"""
Success response helpers.

Mirror the error envelope produced by the exception handler so that every
response carries a top-level ``status``.
"""

from collections import OrderedDict
from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = http_status.HTTP_200_OK,
) -> Response:
    """Build ``{"status": "success", "message"?: ..., "data"?: ...}``."""
    body = OrderedDict([('status', 'success')])
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return Response(body, status=status_code)


def created_response(data: Any = None, message: Optional[str] = None) -> Response:
    return success_response(data, message, status_code=http_status.HTTP_201_CREATED)
