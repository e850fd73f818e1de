from unittest.mock import patch

from django.test import TestCase, override_settings

from apps.approvals.services import CredentialIssuer
from apps.authentication.models import User
from apps.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from tests.factories import UserFactory


class CredentialIssuerTests(TestCase):

    def setUp(self):
        self.account = UserFactory(role=User.ROLE_SUPERVISOR, status=User.STATUS_PENDING)

    def test_issue_assigns_prefixed_employee_id_and_password(self):
        credentials = CredentialIssuer.issue(self.account.pk)

        self.account.refresh_from_db()
        self.assertEqual(credentials.employee_id, 'SPV00001')
        self.assertEqual(self.account.employee_id, 'SPV00001')
        self.assertEqual(credentials.email, self.account.email)
        self.assertTrue(self.account.check_password(credentials.temporary_password))
        self.assertTrue(self.account.must_change_password)
        self.assertNotEqual(self.account.password, credentials.temporary_password)

    def test_sequence_follows_highest_existing_id(self):
        UserFactory(role=User.ROLE_SUPERVISOR, employee_id='SPV00007')
        UserFactory(role=User.ROLE_SUPERVISOR, employee_id='SPV00003')
        UserFactory(role=User.ROLE_GENERAL_SUPERVISOR, employee_id='GS00042')

        self.assertEqual(CredentialIssuer.next_employee_id('SPV'), 'SPV00008')
        self.assertEqual(CredentialIssuer.next_employee_id('GS'), 'GS00043')

    def test_already_issued(self):
        CredentialIssuer.issue(self.account.pk)
        with self.assertRaises(InvalidStateError):
            CredentialIssuer.issue(self.account.pk)

    def test_unknown_account(self):
        with self.assertRaises(NotFoundError):
            CredentialIssuer.issue('00000000-0000-0000-0000-000000000000')

    def test_collision_is_retried(self):
        UserFactory(role=User.ROLE_SUPERVISOR, employee_id='SPV00001')
        with patch.object(CredentialIssuer, 'next_employee_id', side_effect=['SPV00001', 'SPV00002']):
            credentials = CredentialIssuer.issue(self.account.pk)
        self.assertEqual(credentials.employee_id, 'SPV00002')

    @override_settings(CREDENTIAL_MAX_ATTEMPTS=3)
    def test_exhausted_retries_conflict(self):
        UserFactory(role=User.ROLE_SUPERVISOR, employee_id='SPV00001')
        with patch.object(CredentialIssuer, 'next_employee_id', return_value='SPV00001') as next_id:
            with self.assertRaises(ConflictError):
                CredentialIssuer.issue(self.account.pk)
        self.assertEqual(next_id.call_count, 3)
        self.account.refresh_from_db()
        self.assertEqual(self.account.employee_id, '')
