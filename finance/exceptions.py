"""
Domain errors and the project-wide DRF exception handler.

Services raise the :class:`FinanceError` subclasses below before touching
any row; the handler renders every error (domain, DRF or unexpected) as
``{success: false, message, code, errors?}``.
"""
import logging

from django.db import IntegrityError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class FinanceError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'finance_error'


class NotFound(FinanceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class AccessDenied(FinanceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied.'
    default_code = 'access_denied'


class InvalidTransition(FinanceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'


class ValidationFailure(FinanceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation failed.'
    default_code = 'validation_failed'

    def __init__(self, detail=None, errors=None):
        super().__init__(detail)
        self.errors = errors or {}


class InsufficientData(FinanceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'Not enough data.'
    default_code = 'insufficient_data'


class Conflict(FinanceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflicting update.'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        logger.warning('Integrity error mapped to conflict: %s', exc)
        exc = Conflict('The record conflicts with existing data.')
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error: %s', exc)
        return Response(
            {'success': False, 'message': 'Server error', 'code': 'server_error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    body = {'success': False}
    if isinstance(exc, ValidationFailure):
        body.update(message=str(exc.detail), code=exc.default_code)
        if exc.errors:
            body['errors'] = exc.errors
    elif isinstance(exc, FinanceError):
        body.update(message=str(exc.detail), code=exc.default_code)
    elif isinstance(exc, exceptions.PermissionDenied):
        body.update(message=str(exc.detail), code=AccessDenied.default_code)
    elif isinstance(exc, exceptions.ValidationError):
        body.update(message='Validation failed.', code='validation_failed', errors=resp.data)
    else:
        # normalize DRF errors (auth, throttling, method not allowed ...)
        detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
        body.update(
            message=str(detail or exc),
            code=getattr(exc, 'default_code', 'api_error'),
        )
    resp.data = body
    return resp
