from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.models import User
from apps.authentication.services import AccountService
from apps.core.exceptions import AuthorizationError, InvalidStateError, NotFoundError
from tests.factories import DirectorFactory, ManagerFactory, OperatorFactory, UserFactory


class AccountModelTests(TestCase):

    def test_is_active_follows_status(self):
        self.assertFalse(UserFactory(status=User.STATUS_PENDING).is_active)
        self.assertTrue(UserFactory(status=User.STATUS_ACTIVE).is_active)
        self.assertFalse(UserFactory(status=User.STATUS_SUSPENDED).is_active)

    def test_accounts_cannot_be_deleted(self):
        with self.assertRaises(InvalidStateError):
            UserFactory().delete()

    def test_create_user_without_password_is_unusable(self):
        user = User.objects.create_user(email='New@Example.com', first_name='N', last_name='U', role=User.ROLE_SUPERVISOR)
        self.assertFalse(user.has_usable_password())
        self.assertEqual(user.status, User.STATUS_PENDING)
        self.assertEqual(user.email, 'New@example.com')

    def test_superuser_is_active_director(self):
        user = User.objects.create_superuser(email='root@example.com', password='pw', first_name='R', last_name='O')
        self.assertEqual(user.role, User.ROLE_DIRECTOR)
        self.assertTrue(user.is_active)


class AccountServiceTests(TestCase):

    def setUp(self):
        self.manager = ManagerFactory()
        self.operator = OperatorFactory()

    def test_suspend_and_reactivate(self):
        account = AccountService.suspend(self.manager, self.operator.pk)
        self.assertEqual(account.status, User.STATUS_SUSPENDED)
        self.operator.refresh_from_db()
        self.assertFalse(self.operator.is_active)

        account = AccountService.reactivate(self.manager, self.operator.pk)
        self.assertEqual(account.status, User.STATUS_ACTIVE)

    def test_suspend_twice_is_invalid_state(self):
        AccountService.suspend(self.manager, self.operator.pk)
        with self.assertRaises(InvalidStateError):
            AccountService.suspend(self.manager, self.operator.pk)

    def test_pending_account_cannot_be_suspended(self):
        pending = UserFactory(status=User.STATUS_PENDING)
        with self.assertRaises(InvalidStateError):
            AccountService.suspend(self.manager, pending.pk)

    def test_cannot_suspend_self_or_director(self):
        with self.assertRaises(AuthorizationError):
            AccountService.suspend(self.manager, self.manager.pk)
        with self.assertRaises(AuthorizationError):
            AccountService.suspend(self.manager, DirectorFactory().pk)

    def test_only_admins_change_status(self):
        with self.assertRaises(AuthorizationError):
            AccountService.suspend(OperatorFactory(), self.operator.pk)

    def test_unknown_account(self):
        with self.assertRaises(NotFoundError):
            AccountService.suspend(self.manager, '00000000-0000-0000-0000-000000000000')


class CreateAccountCommandTests(TestCase):

    def test_creates_director_with_generated_password(self):
        out = StringIO()
        call_command(
            'create_account', '--email', 'boss@example.com', '--first-name', 'Ama', '--last-name', 'Boateng',
            stdout=out,
        )
        user = User.objects.get(email='boss@example.com')
        self.assertEqual(user.role, User.ROLE_DIRECTOR)
        self.assertTrue(user.is_active)
        self.assertTrue(user.must_change_password)
        self.assertIn('Temporary password', out.getvalue())

    def test_duplicate_email(self):
        UserFactory(email='boss@example.com')
        with self.assertRaises(CommandError):
            call_command(
                'create_account', '--email', 'BOSS@example.com', '--first-name', 'A', '--last-name', 'B',
                stdout=StringIO(),
            )


class TokenAPITests(APITestCase):

    def test_active_account_obtains_token_with_role_claim(self):
        user = ManagerFactory(email='mgr@example.com')
        response = self.client.post('/api/v1/auth/token/', {'email': 'mgr@example.com', 'password': 'testpass123'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['role'], User.ROLE_MANAGER)
        self.assertEqual(response.data['user']['id'], str(user.pk))

    def test_pending_account_cannot_log_in(self):
        UserFactory(email='pending@example.com', status=User.STATUS_PENDING)
        response = self.client.post('/api/v1/auth/token/', {'email': 'pending@example.com', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile(self):
        user = OperatorFactory()
        self.client.force_authenticate(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['employee_id'], user.employee_id)

    def test_suspend_endpoint(self):
        manager = ManagerFactory()
        operator = OperatorFactory()
        self.client.force_authenticate(manager)

        response = self.client.post(f'/api/v1/auth/accounts/{operator.pk}/suspend/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], User.STATUS_SUSPENDED)

        response = self.client.post(f'/api/v1/auth/accounts/{operator.pk}/suspend/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()['error']['type'], 'invalid_state')

    def test_operator_cannot_list_accounts(self):
        self.client.force_authenticate(OperatorFactory())
        response = self.client.get('/api/v1/auth/accounts/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
