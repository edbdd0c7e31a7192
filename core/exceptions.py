"""
API error types and the REST framework exception handler.

Every error response has the shape ``{"message": ...}``; field-level
validation failures add an ``errors`` mapping.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InvalidOperation(exceptions.APIException):
    """A request that is well-formed but violates a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid operation.'
    default_code = 'invalid_operation'


class Conflict(exceptions.APIException):
    """
    Duplicate resource (second application, second save, taken email).

    Reported as 400 to match the rest of the API's client contract.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Duplicate key error'
    default_code = 'conflict'


class MediaServiceError(exceptions.APIException):
    """The image hosting service rejected or failed an upload."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Image upload failed.'
    default_code = 'media_service_error'


def _django_validation_detail(exc):
    if hasattr(exc, 'error_dict'):
        return exc.message_dict
    return exc.messages


def api_exception_handler(exc, context):
    """
    Render exceptions raised by API views.

    Mapping:
    - serializer / model ValidationError -> 400 {"message": "Validation Error", "errors": {...}}
    - IntegrityError -> 400 {"message": "Duplicate key error"}
    - other APIException -> its status with {"message": detail}
    - anything else -> logged, 500 {"message": "Internal Server Error"}
    """
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(detail=_django_validation_detail(exc))
    elif isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error in {context.get('view').__class__.__name__}: {exc}")
        exc = Conflict()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__}: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__)
        )
        return Response(
            {'message': 'Internal Server Error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            'message': 'Validation Error',
            'errors': response.data,
        }
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'message': response.data['detail']}
    else:
        response.data = {'message': response.data}

    return response
