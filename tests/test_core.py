import logging

from django.test import RequestFactory, SimpleTestCase, TestCase
from rest_framework.test import APIRequestFactory

from apps.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    custom_exception_handler,
)
from apps.core.logging import CorrelationIdFilter, get_correlation_id, set_correlation_id
from apps.core.middleware import CorrelationIdMiddleware
from apps.core.permissions import role_required
from tests.factories import ManagerFactory, OperatorFactory


class DomainErrorTests(SimpleTestCase):

    def test_validation_error_normalises_fields(self):
        error = ValidationError({'email': 'Required', 'phone': ['Bad', 'Worse']})
        self.assertEqual(error.errors, {'email': ['Required'], 'phone': ['Bad', 'Worse']})
        self.assertEqual(error.message, 'email: Required')

    def test_validation_error_from_string(self):
        error = ValidationError('Nothing to do')
        self.assertEqual(error.errors, {'non_field_errors': ['Nothing to do']})
        self.assertEqual(error.message, 'Nothing to do')

    def test_not_found_message(self):
        self.assertEqual(NotFoundError('Beat', 'abc').message, 'Beat with ID abc not found')
        self.assertEqual(NotFoundError('Beat').message, 'Beat not found')

    def test_handler_renders_domain_errors(self):
        request = APIRequestFactory().post('/api/v1/assignments/')
        response = custom_exception_handler(ConflictError('Beat is full', details={'capacity': 1}), {'request': request})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {
            'success': False,
            'error': {'code': 409, 'type': 'conflict', 'message': 'Beat is full', 'details': {'capacity': 1}},
        })

    def test_authorization_errors_reach_security_log(self):
        request = APIRequestFactory().post('/api/v1/approvals/registrations/')
        with self.assertLogs('security.audit', level='WARNING') as logs:
            response = custom_exception_handler(AuthorizationError(), {'request': request})
        self.assertEqual(response.status_code, 403)
        self.assertIn('permission_denied', logs.output[0])

    def test_unexpected_errors_become_500(self):
        with self.assertLogs('apps.core.exceptions', level='ERROR'):
            response = custom_exception_handler(RuntimeError('boom'), {})
        self.assertEqual(response.status_code, 500)
        self.assertNotIn('boom', str(response.data))


class CorrelationIdTests(SimpleTestCase):

    def test_filter_stamps_records(self):
        record = logging.LogRecord('x', logging.INFO, __file__, 1, 'msg', None, None)
        set_correlation_id('abc-1')
        try:
            CorrelationIdFilter().filter(record)
        finally:
            set_correlation_id(None)
        self.assertEqual(record.correlation_id, 'abc-1')

        CorrelationIdFilter().filter(record)
        self.assertEqual(record.correlation_id, 'unknown')

    def test_middleware_scopes_id_to_request(self):
        seen = {}

        def view(request):
            from django.http import HttpResponse
            seen['id'] = get_correlation_id()
            return HttpResponse('ok')

        request = RequestFactory().get('/', HTTP_X_CORRELATION_ID='trace.42')
        response = CorrelationIdMiddleware(view)(request)

        self.assertEqual(seen['id'], 'trace.42')
        self.assertEqual(request.correlation_id, 'trace.42')
        self.assertEqual(response['X-Correlation-ID'], 'trace.42')
        self.assertIsNone(get_correlation_id())


class RolePermissionTests(TestCase):

    def test_role_required_factory(self):
        permission = role_required('manager')()
        request = APIRequestFactory().get('/')

        request.user = ManagerFactory()
        self.assertTrue(permission.has_permission(request, None))

        request.user = OperatorFactory()
        self.assertFalse(permission.has_permission(request, None))

        request.user = ManagerFactory(status='suspended')
        self.assertFalse(permission.has_permission(request, None))
