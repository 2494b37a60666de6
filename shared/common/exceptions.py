# shared/common/exceptions.py
"""
Custom Exception Classes and Exception Handler
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class BaseAPIException(APIException):
    """Base exception class for all custom API exceptions"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An unexpected error occurred.'
    default_code = 'error'
    error_code = 'INTERNAL_ERROR'

    def __init__(
        self,
        detail: Optional[str] = None,
        code: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict] = None
    ):
        super().__init__(detail=detail, code=code)
        self.error_code = error_code or self.error_code
        self.extra_data = extra_data or {}

    @property
    def message(self) -> str:
        return str(self.detail)


# =============================================================================
# CLIENT ERRORS (4xx)
# =============================================================================

class ValidationException(BaseAPIException):
    """400 Validation Error"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation error.'
    default_code = 'validation_error'
    error_code = 'VALIDATION_ERROR'

    def __init__(self, detail: str = None, errors: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(detail=detail, **kwargs)
        if errors:
            self.extra_data['errors'] = errors


class UnauthorizedException(BaseAPIException):
    """401 Unauthorized"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication credentials were not provided or are invalid.'
    default_code = 'unauthorized'
    error_code = 'UNAUTHORIZED'


class ForbiddenException(BaseAPIException):
    """403 Forbidden"""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'
    error_code = 'FORBIDDEN'


class NotFoundException(BaseAPIException):
    """404 Not Found"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'
    error_code = 'NOT_FOUND'


class ConflictException(BaseAPIException):
    """
    Conflict with the current state of a resource.

    Duplicates and capacity conflicts are client errors answered with 400.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'A conflict occurred with the current state of the resource.'
    default_code = 'conflict'
    error_code = 'CONFLICT'


# =============================================================================
# SERVER ERRORS (5xx)
# =============================================================================

class InternalServerException(BaseAPIException):
    """500 Internal Server Error"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An internal server error occurred.'
    default_code = 'internal_server_error'
    error_code = 'INTERNAL_ERROR'


GENERIC_ERROR_MESSAGE = 'An unexpected error occurred. Please try again later.'


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    Custom exception handler for DRF.
    Every error leaves the API as {"status": "error", "message": ..., "code": ...}.
    """

    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    # Translate Django errors so DRF can render them
    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        exc = ValidationException(errors=errors)
    elif isinstance(exc, Http404):
        exc = NotFoundException(str(exc) or None)

    response = exception_handler(exc, context)

    if response is not None:
        if response.status_code >= 500:
            logger.error(f"Server error: {exc}", extra={'request_id': request_id})
        return format_error_response(exc, response, request_id)

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
        }
    )

    error = {
        'status': 'error',
        'message': GENERIC_ERROR_MESSAGE,
        'code': InternalServerException.error_code,
        'request_id': request_id,
    }

    # Detailed errors only outside production
    if settings.DEBUG:
        error['message'] = str(exc)
        error['type'] = type(exc).__name__
        error['traceback'] = traceback.format_exc().split('\n')

    return Response(error, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def format_error_response(exc, response: Response, request_id: str = None) -> Response:
    """Format error response in consistent structure"""

    extra_data = dict(getattr(exc, 'extra_data', {}))
    error_code = getattr(exc, 'error_code', None) or get_default_error_code(response.status_code)

    error_data = {
        'status': 'error',
        'message': get_error_message(exc, response),
        'code': error_code,
        'request_id': request_id,
    }

    errors = extra_data.pop('errors', None)
    if errors:
        error_data['errors'] = errors
    elif isinstance(response.data, dict) and 'detail' not in response.data:
        # Field-level validation errors from DRF serializers
        error_data['errors'] = response.data
        error_data['message'] = 'Validation error'
    elif isinstance(response.data, list):
        error_data['errors'] = {'non_field_errors': response.data}

    error_data.update(extra_data)

    response.data = error_data
    return response


def get_default_error_code(status_code: int) -> str:
    return {
        400: 'VALIDATION_ERROR',
        401: 'UNAUTHORIZED',
        403: 'FORBIDDEN',
        404: 'NOT_FOUND',
        405: 'METHOD_NOT_ALLOWED',
    }.get(status_code, 'ERROR')


def get_error_message(exc, response: Response) -> str:
    """Extract error message from exception or response"""

    if hasattr(exc, 'detail'):
        if isinstance(exc.detail, str):
            return exc.detail
        if isinstance(exc.detail, list) and exc.detail:
            return str(exc.detail[0])
        if isinstance(exc.detail, dict):
            return str(exc.detail.get('detail', 'Validation error'))

    if isinstance(response.data, dict):
        return str(response.data.get('detail', response.data))

    return str(response.data)
