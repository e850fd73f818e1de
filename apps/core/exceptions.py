"""
Domain error taxonomy and the DRF exception handler
"""

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, PermissionDenied, Throttled
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
import logging

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


class DomainError(Exception):
    """Base exception for engine errors surfaced to the caller"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = 'error'

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthorizationError(DomainError):
    """Actor's role does not permit the operation. Never retried."""

    status_code = status.HTTP_403_FORBIDDEN
    code = 'permission_denied'

    def __init__(self, message="You do not have permission to perform this action"):
        super().__init__(message)


class ValidationError(DomainError):
    """Missing or malformed input, reported per field"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = 'validation_error'

    def __init__(self, errors, message=None):
        if isinstance(errors, str):
            errors = {'non_field_errors': [errors]}
        self.errors = {
            field: value if isinstance(value, list) else [value]
            for field, value in errors.items()
        }
        if message is None:
            field, messages = next(iter(self.errors.items()))
            message = messages[0] if field == 'non_field_errors' else f"{field}: {messages[0]}"
        super().__init__(message, details=self.errors)


class InvalidStateError(DomainError):
    """Record is not in the state the operation requires"""

    status_code = status.HTTP_409_CONFLICT
    code = 'invalid_state'


class NotFoundError(DomainError):
    """Unknown entity id"""

    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'

    def __init__(self, resource_type, resource_id=None):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} with ID {resource_id} not found"
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class ConflictError(DomainError):
    """Capacity exceeded, duplicate resource, or exhausted retries"""

    status_code = status.HTTP_409_CONFLICT
    code = 'conflict'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error responses.
    """
    if isinstance(exc, DomainError):
        return _domain_error_response(exc, context)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        _log_security_event(exc, context, response.status_code)
        response.data = {
            'success': False,
            'error': {
                'code': response.status_code,
                'message': get_error_message(response.data),
                'details': response.data if isinstance(response.data, dict) else {'detail': response.data},
            }
        }
        return response

    # Handle Django ValidationError
    if isinstance(exc, DjangoValidationError):
        logger.warning("Validation error: %s", exc)
        details = exc.message_dict if hasattr(exc, 'error_dict') else {'validation_errors': exc.messages}
        return Response(
            {
                'success': False,
                'error': {
                    'code': 400,
                    'message': 'Validation Error',
                    'details': details,
                }
            },
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, Http404):
        return Response(
            {
                'success': False,
                'error': {
                    'code': 404,
                    'message': 'Not Found',
                    'details': {'detail': str(exc)},
                }
            },
            status=status.HTTP_404_NOT_FOUND
        )

    logger.exception("Unexpected error: %s", exc)

    return Response(
        {
            'success': False,
            'error': {
                'code': 500,
                'message': 'Internal Server Error',
                'details': {'detail': 'An unexpected error occurred.'},
            }
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _domain_error_response(exc, context):
    if isinstance(exc, AuthorizationError):
        _log_security_event(exc, context, exc.status_code)
    else:
        logger.info("domain_error type=%s message=%s", exc.code, exc.message)
    return Response(
        {
            'success': False,
            'error': {
                'code': exc.status_code,
                'type': exc.code,
                'message': exc.message,
                'details': exc.details,
            }
        },
        status=exc.status_code,
    )


def _log_security_event(exc, context, status_code):
    if status_code not in (401, 403, 429):
        return

    request = context.get("request")
    if request is None:
        return

    user = getattr(request, "user", None)
    user_id = getattr(user, "id", None) if user and getattr(user, "is_authenticated", False) else None
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        event_type = "auth_failed"
    elif isinstance(exc, (PermissionDenied, AuthorizationError)):
        event_type = "permission_denied"
    elif isinstance(exc, Throttled):
        event_type = "throttled"
    else:
        event_type = "security_event"

    security_logger.warning(
        "api_security_event type=%s status=%s method=%s path=%s user_id=%s ip=%s error=%s",
        event_type,
        status_code,
        request.method,
        request.path,
        user_id,
        request.META.get("REMOTE_ADDR"),
        exc.__class__.__name__,
    )


def get_error_message(data):
    """Extract a user-friendly error message from response data"""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        if 'non_field_errors' in data:
            return str(data['non_field_errors'][0])
        for key, value in data.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
            elif isinstance(value, str):
                return f"{key}: {value}"
    elif isinstance(data, list) and data:
        return str(data[0])
    return str(data)
