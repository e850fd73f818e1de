"""Correlation-id middleware feeding apps.core.logging."""
import logging
import re
import uuid

from .logging import set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = 'HTTP_X_CORRELATION_ID'
RESPONSE_HEADER = 'X-Correlation-ID'
_VALID_ID = re.compile(r'^[A-Za-z0-9._-]{1,64}$')


class CorrelationIdMiddleware:
    """Reuse the caller's X-Correlation-ID (or mint one) for the lifetime of the request."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        correlation_id = self._resolve(request)
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)
        try:
            response = self.get_response(request)
        finally:
            set_correlation_id(None)
        response[RESPONSE_HEADER] = correlation_id
        return response

    @staticmethod
    def _resolve(request):
        incoming = request.META.get(CORRELATION_HEADER, '').strip()
        if incoming and _VALID_ID.match(incoming):
            return incoming
        if incoming:
            logger.debug('Discarding malformed correlation id header')
        return uuid.uuid4().hex
