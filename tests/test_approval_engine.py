"""
Approval workflow: submission authority, decisions, credentials and events.
"""

from unittest.mock import patch

from django.core import mail
from django.test import TestCase

from apps.approvals.models import ApprovalAction
from apps.approvals.services import ApprovalEngine, RegistrationPayload
from apps.authentication.models import User
from apps.core.exceptions import AuthorizationError, ConflictError, InvalidStateError, ValidationError
from apps.hierarchy.models import SupervisorRecord
from apps.hierarchy.services import HierarchyRegistry
from apps.notifications.defaults import REDACTED_PLACEHOLDER
from apps.notifications.models import Notification
from tests.factories import (
    DirectorFactory,
    GeneralSupervisorRecordFactory,
    LocationFactory,
    ManagerFactory,
    UserFactory,
)


def gs_payload(**overrides):
    data = {
        'supervisor_type': SupervisorRecord.TYPE_GENERAL_SUPERVISOR,
        'first_name': 'Grace',
        'last_name': 'Okafor',
        'email': 'grace@example.com',
        'region_assigned': 'North',
    }
    data.update(overrides)
    return RegistrationPayload(**data)


def supervisor_payload(**overrides):
    data = {
        'supervisor_type': SupervisorRecord.TYPE_SUPERVISOR,
        'first_name': 'Sam',
        'last_name': 'Mensah',
        'email': 'sam@example.com',
    }
    data.update(overrides)
    return RegistrationPayload(**data)


class SubmitRegistrationTests(TestCase):

    def setUp(self):
        self.director = DirectorFactory()
        self.manager = ManagerFactory()
        self.gs_record = GeneralSupervisorRecordFactory()
        self.general_supervisor = self.gs_record.account
        self.location = LocationFactory()

    def test_manager_submits_general_supervisor(self):
        record = ApprovalEngine.submit_registration(self.manager, gs_payload())

        self.assertEqual(record.approval_status, SupervisorRecord.STATUS_PENDING)
        self.assertEqual(record.supervisor_type, SupervisorRecord.TYPE_GENERAL_SUPERVISOR)
        self.assertEqual(record.registered_by, self.manager)
        self.assertEqual(record.region_assigned, 'North')

        account = record.account
        self.assertEqual(account.role, User.ROLE_GENERAL_SUPERVISOR)
        self.assertEqual(account.status, User.STATUS_PENDING)
        self.assertFalse(account.is_active)
        self.assertFalse(account.has_usable_password())
        self.assertEqual(account.employee_id, '')

        self.assertTrue(
            ApprovalAction.objects.filter(record=record, actor=self.manager, action='submitted').exists()
        )

    def test_general_supervisor_submits_supervisor_under_own_record(self):
        record = ApprovalEngine.submit_registration(
            self.general_supervisor,
            supervisor_payload(location_id=self.location.pk),
        )

        self.assertEqual(record.general_supervisor, self.gs_record)
        self.assertEqual(record.location, self.location)
        self.assertEqual(record.account.role, User.ROLE_SUPERVISOR)

    def test_submitter_accepts_actor_id(self):
        record = ApprovalEngine.submit_registration(self.manager.pk, gs_payload())
        self.assertEqual(record.registered_by_id, self.manager.pk)

    def test_manager_cannot_submit_supervisor(self):
        with self.assertRaises(AuthorizationError):
            ApprovalEngine.submit_registration(self.manager, supervisor_payload())
        self.assertFalse(User.objects.filter(email='sam@example.com').exists())

    def test_general_supervisor_cannot_submit_general_supervisor(self):
        with self.assertRaises(AuthorizationError):
            ApprovalEngine.submit_registration(self.general_supervisor, gs_payload())

    def test_director_cannot_submit(self):
        with self.assertRaises(AuthorizationError):
            ApprovalEngine.submit_registration(self.director, gs_payload())

    def test_inactive_submitter_rejected(self):
        suspended = ManagerFactory(status=User.STATUS_SUSPENDED)
        with self.assertRaises(AuthorizationError):
            ApprovalEngine.submit_registration(suspended, gs_payload())

    def test_missing_required_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            ApprovalEngine.submit_registration(self.manager, gs_payload(first_name='', email=' '))
        self.assertIn('first_name', ctx.exception.errors)
        self.assertIn('email', ctx.exception.errors)

    def test_general_supervisor_payload_rejects_location(self):
        with self.assertRaises(ValidationError) as ctx:
            ApprovalEngine.submit_registration(self.manager, gs_payload(location_id=self.location.pk))
        self.assertIn('location_id', ctx.exception.errors)

    def test_supervisor_payload_rejects_region(self):
        with self.assertRaises(ValidationError) as ctx:
            ApprovalEngine.submit_registration(
                self.general_supervisor, supervisor_payload(region_assigned='East')
            )
        self.assertIn('region_assigned', ctx.exception.errors)

    def test_inactive_location_rejected(self):
        closed = LocationFactory(is_active=False)
        with self.assertRaises(ValidationError):
            ApprovalEngine.submit_registration(
                self.general_supervisor, supervisor_payload(location_id=closed.pk)
            )

    def test_pending_general_supervisor_cannot_be_parent(self):
        pending_gs = GeneralSupervisorRecordFactory(approval_status=SupervisorRecord.STATUS_PENDING)
        with self.assertRaises(ValidationError):
            ApprovalEngine.submit_registration(
                self.general_supervisor,
                supervisor_payload(general_supervisor_id=pending_gs.pk),
            )

    def test_duplicate_email_conflicts(self):
        UserFactory(email='grace@example.com')
        with self.assertRaises(ConflictError):
            ApprovalEngine.submit_registration(self.manager, gs_payload(email='Grace@Example.com'))

    def test_duplicate_phone_conflicts(self):
        UserFactory(phone='+15550000001')
        with self.assertRaises(ConflictError):
            ApprovalEngine.submit_registration(self.manager, gs_payload(phone='+15550000001'))

    def test_unknown_supervisor_type(self):
        with self.assertRaises(ValidationError):
            ApprovalEngine.submit_registration(self.manager, gs_payload(supervisor_type='operator'))


class DecideRegistrationTests(TestCase):

    def setUp(self):
        self.director = DirectorFactory()
        self.manager = ManagerFactory()
        self.record = ApprovalEngine.submit_registration(self.manager, gs_payload())

    def test_director_approves_general_supervisor(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            result = ApprovalEngine.decide(self.director, self.record.pk, 'approve')

        self.assertEqual(len(callbacks), 1)
        record = result.record
        self.assertEqual(record.approval_status, SupervisorRecord.STATUS_APPROVED)
        self.assertEqual(record.decided_by, self.director)
        self.assertIsNotNone(record.decided_at)

        account = User.objects.get(pk=record.account_id)
        self.assertEqual(account.status, User.STATUS_ACTIVE)
        self.assertTrue(account.employee_id.startswith('GS'))
        self.assertEqual(len(account.employee_id), 7)
        self.assertTrue(account.must_change_password)
        self.assertTrue(account.check_password(result.credentials.temporary_password))
        self.assertEqual(result.credentials.employee_id, account.employee_id)

        notification = Notification.objects.get(recipient=self.manager)
        self.assertEqual(notification.event_code, 'approvals.supervisor_approved')
        self.assertTrue(notification.redacted)
        self.assertNotIn(result.credentials.temporary_password, notification.body)
        self.assertIn(REDACTED_PLACEHOLDER, notification.body)
        self.assertNotIn(result.credentials.temporary_password, str(notification.metadata))

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.manager.email])
        self.assertIn(result.credentials.temporary_password, mail.outbox[0].body)

    def test_decision_is_case_insensitive(self):
        result = ApprovalEngine.decide(self.director, self.record.pk, 'APPROVE')
        self.assertEqual(result.record.approval_status, SupervisorRecord.STATUS_APPROVED)

    def test_reject_with_reason(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = ApprovalEngine.decide(self.director, self.record.pk, 'reject', 'Incomplete documents')

        self.assertIsNone(result.credentials)
        self.assertEqual(result.record.approval_status, SupervisorRecord.STATUS_REJECTED)
        self.assertEqual(result.record.rejection_reason, 'Incomplete documents')

        account = User.objects.get(pk=self.record.account_id)
        self.assertEqual(account.status, User.STATUS_PENDING)
        self.assertEqual(account.employee_id, '')

        notification = Notification.objects.get(recipient=self.manager)
        self.assertEqual(notification.event_code, 'approvals.supervisor_rejected')
        self.assertIn('Incomplete documents', notification.body)
        self.assertFalse(notification.redacted)

    def test_reject_requires_reason(self):
        with self.assertRaises(ValidationError):
            ApprovalEngine.decide(self.director, self.record.pk, 'reject', '  ')
        self.record.refresh_from_db()
        self.assertEqual(self.record.approval_status, SupervisorRecord.STATUS_PENDING)

    def test_unknown_decision(self):
        with self.assertRaises(ValidationError):
            ApprovalEngine.decide(self.director, self.record.pk, 'maybe')

    def test_manager_cannot_decide_general_supervisor(self):
        with self.assertRaises(AuthorizationError):
            ApprovalEngine.decide(self.manager, self.record.pk, 'approve')

    def test_director_cannot_decide_supervisor(self):
        gs_record = GeneralSupervisorRecordFactory()
        supervisor_record = ApprovalEngine.submit_registration(gs_record.account, supervisor_payload())
        with self.assertRaises(AuthorizationError):
            ApprovalEngine.decide(self.director, supervisor_record.pk, 'approve')
        result = ApprovalEngine.decide(self.manager, supervisor_record.pk, 'approve')
        self.assertTrue(result.credentials.employee_id.startswith('SPV'))

    def test_second_decision_is_invalid_state(self):
        ApprovalEngine.decide(self.director, self.record.pk, 'approve')
        with self.assertRaises(InvalidStateError):
            ApprovalEngine.decide(self.director, self.record.pk, 'reject', 'Changed my mind')

    def test_losing_concurrent_decision_has_no_side_effects(self):
        """The record is decided elsewhere between the read and the conditional update."""
        stale = HierarchyRegistry.get_supervisor(self.record.pk)
        SupervisorRecord.objects.filter(pk=self.record.pk).update(
            approval_status=SupervisorRecord.STATUS_REJECTED, rejection_reason='Other approver'
        )

        with patch.object(HierarchyRegistry, 'get_supervisor', return_value=stale):
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with self.assertRaises(InvalidStateError):
                    ApprovalEngine.decide(self.director, self.record.pk, 'approve')

        self.assertEqual(callbacks, [])
        account = User.objects.get(pk=self.record.account_id)
        self.assertEqual(account.employee_id, '')
        self.assertFalse(account.has_usable_password())
        self.assertFalse(Notification.objects.exists())
        self.assertFalse(ApprovalAction.objects.filter(record=self.record, action='approved').exists())

    def test_credential_failure_prevents_approval(self):
        with patch(
            'apps.approvals.services.approval_engine.CredentialIssuer.issue',
            side_effect=ConflictError('Could not allocate a unique employee id'),
        ):
            with self.assertRaises(ConflictError):
                ApprovalEngine.decide(self.director, self.record.pk, 'approve')

        self.record.refresh_from_db()
        self.assertEqual(self.record.approval_status, SupervisorRecord.STATUS_PENDING)
        self.assertIsNone(self.record.decided_by)

    def test_credentials_repr_hides_password(self):
        result = ApprovalEngine.decide(self.director, self.record.pk, 'approve')
        self.assertNotIn(result.credentials.temporary_password, repr(result.credentials))


class ApprovalQueriesTests(TestCase):

    def setUp(self):
        self.director = DirectorFactory()
        self.manager = ManagerFactory()
        self.gs_record = GeneralSupervisorRecordFactory()
        self.pending_gs = ApprovalEngine.submit_registration(self.manager, gs_payload())
        self.pending_supervisor = ApprovalEngine.submit_registration(
            self.gs_record.account, supervisor_payload()
        )

    def test_list_pending_by_role(self):
        self.assertEqual(list(ApprovalEngine.list_pending(User.ROLE_DIRECTOR)), [self.pending_gs])
        self.assertEqual(list(ApprovalEngine.list_pending(User.ROLE_MANAGER)), [self.pending_supervisor])
        self.assertEqual(list(ApprovalEngine.list_pending(User.ROLE_OPERATOR)), [])

    def test_stats_recomputed_from_state(self):
        stats = ApprovalEngine.get_approval_stats()
        self.assertEqual(stats['pending'], 2)
        self.assertEqual(stats['approved'], 1)  # factory-approved general supervisor
        self.assertEqual(stats['pending_general_supervisor'], 1)
        self.assertEqual(stats['pending_supervisor'], 1)

        ApprovalEngine.decide(self.director, self.pending_gs.pk, 'approve')
        ApprovalEngine.decide(self.manager, self.pending_supervisor.pk, 'reject', 'Duplicate')

        stats = ApprovalEngine.get_approval_stats()
        self.assertEqual(stats['total'], 3)
        self.assertEqual(stats['pending'], 0)
        self.assertEqual(stats['approved'], 2)
        self.assertEqual(stats['rejected'], 1)
        self.assertEqual(stats['approved_general_supervisor'], 2)
        self.assertEqual(stats['approved_today'], 1)
        self.assertEqual(stats['rejected_today'], 1)
        self.assertEqual(stats['approved_this_week'], 1)
