# shared/common/exceptions.py
"""
API exception hierarchy and the DRF exception handler for the LMS API.
"""

import logging
from typing import Dict, Optional
from rest_framework import status
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
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


# =============================================================================
# CLIENT ERRORS (4xx)
# =============================================================================

class BadRequestException(BaseAPIException):
    """400 Bad Request"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'
    error_code = 'BAD_REQUEST'


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
    """409 Conflict"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A conflict occurred with the current state of the resource.'
    default_code = 'conflict'
    error_code = 'CONFLICT'


class UnprocessableEntityException(BaseAPIException):
    """422 Unprocessable Entity"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'The request was well-formed but could not be processed.'
    default_code = 'unprocessable_entity'
    error_code = 'UNPROCESSABLE_ENTITY'


class ResourceLockedException(BaseAPIException):
    """423 Locked"""
    status_code = status.HTTP_423_LOCKED
    default_detail = 'The resource is locked.'
    default_code = 'locked'
    error_code = 'RESOURCE_LOCKED'


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def error_body(code: str, message: str, request_id: Optional[str], details=None) -> Dict:
    """The ``{"success": false, "error": {...}}`` envelope."""
    error = {'code': code, 'message': message, 'request_id': request_id}
    if details:
        error['details'] = details
    return {'success': False, 'error': error}


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    DRF exception handler rendering every failure in one envelope.

    DRF and ``BaseAPIException`` errors keep their status. Django
    ``ValidationError`` raised from model hooks or services becomes a 400,
    a protected delete becomes a 409 and ``Http404`` a 404. Anything else
    is logged and answered with a 500 that hides the cause.
    """
    from rest_framework.views import exception_handler

    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    response = exception_handler(exc, context)
    if response is not None:
        return format_error_response(exc, response, request_id)

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        message = exc.messages[0] if exc.messages else 'Validation error'
        return Response(
            error_body('VALIDATION_ERROR', message, request_id, details),
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, ProtectedError):
        return Response(
            error_body('CONFLICT', 'The record is still referenced and cannot be deleted.', request_id),
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, Http404):
        return Response(
            error_body('NOT_FOUND', str(exc) or 'Resource not found', request_id),
            status=status.HTTP_404_NOT_FOUND,
        )

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={'request_id': request_id, 'exception_type': type(exc).__name__},
    )
    message = str(exc) if settings.DEBUG else 'An unexpected error occurred. Please try again later.'
    return Response(
        error_body('INTERNAL_ERROR', message, request_id),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def format_error_response(exc, response: Response, request_id: Optional[str] = None) -> Response:
    """Rewrite a DRF error response into the envelope."""
    code = getattr(exc, 'error_code', None) or str(getattr(exc, 'default_code', 'error')).upper()

    details = getattr(exc, 'extra_data', {}).get('errors')
    if not details and isinstance(response.data, dict) and 'detail' not in response.data:
        details = response.data

    response.data = error_body(code, get_error_message(exc, response), request_id, details)
    return response


def get_error_message(exc, response: Response) -> str:
    """First human readable message of an exception."""
    detail = getattr(exc, 'detail', None)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        if 'detail' in detail:
            return str(detail['detail'])
        first = next(iter(detail.values()), None)
        if isinstance(first, list) and first:
            return str(first[0])
        return str(detail)

    if isinstance(response.data, dict):
        return response.data.get('detail', str(response.data))
    return str(response.data)
