"""
Notification dispatch: redaction of one-time values, failure isolation,
out-of-band retry and the inbox.
"""

from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from apps.approvals.services import ApprovalEngine, RegistrationPayload
from apps.hierarchy.models import SupervisorRecord
from apps.notifications.defaults import DEFAULT_TEMPLATES, REDACTED_PLACEHOLDER
from apps.notifications.events import EventPublisher, SupervisorRejected
from apps.notifications.models import Notification, NotificationTemplate
from apps.notifications.services import NotificationService
from apps.notifications.tasks import retry_failed_notifications, send_notification_task
from tests.factories import (
    DirectorFactory,
    ManagerFactory,
    NotificationFactory,
    NotificationTemplateFactory,
    UserFactory,
)


def failing_handler(notification, content):
    raise ConnectionError('smtp down')


class NotifyTests(TestCase):

    def setUp(self):
        self.recipient = UserFactory()

    def test_in_app_notification_is_delivered(self):
        notification = NotificationService.notify(
            recipient=self.recipient,
            template_code='approvals.supervisor_rejected',
            context={'supervisor_name': 'Ada Obi', 'supervisor_type': 'Supervisor', 'reason': 'Duplicate'},
        )
        notification.refresh_from_db()
        self.assertEqual(notification.status, Notification.STATUS_SENT)
        self.assertEqual(notification.delivery_attempts, 1)
        self.assertIsNone(notification.template)
        self.assertEqual(notification.subject, 'Ada Obi was not approved')

    def test_stored_template_overrides_default(self):
        template = NotificationTemplateFactory(
            code='approvals.supervisor_rejected',
            subject='Rejected: {{ supervisor_name }}',
            body='{{ reason }}',
            variables=['supervisor_name', 'reason'],
        )
        notification = NotificationService.notify(
            recipient=self.recipient,
            template_code='approvals.supervisor_rejected',
            context={'supervisor_name': 'Ada Obi', 'reason': 'Duplicate'},
        )
        self.assertEqual(notification.template, template)
        self.assertEqual(notification.subject, 'Rejected: Ada Obi')

    def test_missing_variables_recorded(self):
        notification = NotificationService.notify(
            recipient=self.recipient,
            template_code='assignments.ended',
            context={'operator_name': 'Kofi'},
        )
        self.assertIn('beat_code', notification.metadata['missing_variables'])

    def test_unknown_template_code(self):
        with self.assertRaises(LookupError):
            NotificationService.notify(recipient=self.recipient, template_code='nope.unknown')

    def test_sensitive_values_only_in_delivered_copy(self):
        notification = NotificationService.notify(
            recipient=self.recipient,
            template_code='approvals.supervisor_approved',
            context={'supervisor_name': 'Ada Obi', 'employee_id': 'GS00001', 'email': 'ada@example.com'},
            sensitive_context={'temporary_password': 's3cret-value'},
        )

        notification.refresh_from_db()
        self.assertTrue(notification.redacted)
        self.assertNotIn('s3cret-value', notification.body)
        self.assertIn(REDACTED_PLACEHOLDER, notification.body)
        self.assertIn('GS00001', notification.body)
        self.assertEqual(notification.status, Notification.STATUS_SENT)

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('s3cret-value', mail.outbox[0].body)

    def test_delivery_failure_marks_row_failed(self):
        with patch.dict(NotificationService.router.channel_handlers, {'in_app': failing_handler}):
            notification = NotificationService.notify(
                recipient=self.recipient,
                template_code='assignments.ended',
                context={'operator_name': 'Kofi', 'beat_code': 'B1', 'end_date': '2026-01-01'},
            )
        notification.refresh_from_db()
        self.assertEqual(notification.status, Notification.STATUS_FAILED)
        self.assertEqual(notification.metadata['last_error'], 'ConnectionError')


class EventDeliveryTests(TestCase):

    def test_delivery_errors_do_not_propagate(self):
        event = SupervisorRejected(recipient_ids=(UserFactory().pk,), record_id=None, reason='x')
        with patch.object(NotificationService, 'notify_event', side_effect=RuntimeError('boom')):
            EventPublisher.deliver(event)

    def test_duplicate_and_missing_recipients_skipped(self):
        recipient = UserFactory()
        event = SupervisorRejected(
            recipient_ids=(recipient.pk, recipient.pk, None),
            supervisor_name='Ada Obi',
            reason='Duplicate',
        )
        EventPublisher.deliver(event)
        self.assertEqual(Notification.objects.filter(recipient=recipient).count(), 1)

    def test_unknown_recipient_is_logged_not_raised(self):
        event = SupervisorRejected(recipient_ids=('00000000-0000-0000-0000-000000000000',), reason='x')
        EventPublisher.deliver(event)
        self.assertFalse(Notification.objects.exists())

    def test_publish_waits_for_commit(self):
        recipient = UserFactory()
        event = SupervisorRejected(recipient_ids=(recipient.pk,), reason='x')
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            EventPublisher.publish(event)
        self.assertEqual(len(callbacks), 1)
        self.assertFalse(Notification.objects.exists())

    def test_failed_email_does_not_undo_approval(self):
        director = DirectorFactory()
        manager = ManagerFactory()
        record = ApprovalEngine.submit_registration(
            manager,
            RegistrationPayload(
                supervisor_type=SupervisorRecord.TYPE_GENERAL_SUPERVISOR,
                first_name='Grace',
                last_name='Okafor',
                email='grace@example.com',
            ),
        )

        with patch.dict(NotificationService.router.channel_handlers, {'email': failing_handler}):
            with self.captureOnCommitCallbacks(execute=True):
                ApprovalEngine.decide(director, record.pk, 'approve')

        record.refresh_from_db()
        self.assertEqual(record.approval_status, SupervisorRecord.STATUS_APPROVED)
        notification = Notification.objects.get(recipient=manager)
        self.assertEqual(notification.status, Notification.STATUS_FAILED)
        self.assertTrue(notification.redacted)


class RetryTests(TestCase):

    def test_retry_redispatches_failed_rows(self):
        failed = NotificationFactory(status=Notification.STATUS_FAILED, delivery_attempts=1)
        result = NotificationService.retry_failed()

        failed.refresh_from_db()
        self.assertEqual(result, {'retried': 1, 'succeeded': 1})
        self.assertEqual(failed.status, Notification.STATUS_SENT)
        self.assertEqual(failed.delivery_attempts, 2)

    def test_stale_pending_rows_are_retried(self):
        stale = NotificationFactory()
        Notification.objects.filter(pk=stale.pk).update(created_at=timezone.now() - timedelta(minutes=30))
        NotificationFactory()  # fresh, still queued

        self.assertEqual(NotificationService.retry_failed()['retried'], 1)

    def test_redacted_rows_are_never_retried(self):
        NotificationFactory(status=Notification.STATUS_FAILED, redacted=True)
        self.assertEqual(NotificationService.retry_failed()['retried'], 0)

    @override_settings(NOTIFICATION_MAX_ATTEMPTS=3)
    def test_attempts_are_bounded(self):
        NotificationFactory(status=Notification.STATUS_FAILED, delivery_attempts=3)
        self.assertEqual(NotificationService.retry_failed()['retried'], 0)

    def test_retry_task(self):
        NotificationFactory(status=Notification.STATUS_FAILED)
        self.assertEqual(retry_failed_notifications(), {'retried': 1, 'succeeded': 1})

    def test_send_task_skips_delivered_and_redacted_rows(self):
        sent = NotificationFactory(status=Notification.STATUS_SENT)
        redacted = NotificationFactory(redacted=True)
        pending = NotificationFactory()

        for notification in (sent, redacted, pending):
            send_notification_task(notification_id=str(notification.pk))

        for notification in (sent, redacted, pending):
            notification.refresh_from_db()
        self.assertEqual(sent.delivery_attempts, 0)
        self.assertEqual(redacted.status, Notification.STATUS_PENDING)
        self.assertEqual(pending.status, Notification.STATUS_SENT)


class InboxTests(TestCase):

    def setUp(self):
        self.user = UserFactory()
        self.first = NotificationFactory(recipient=self.user)
        self.second = NotificationFactory(recipient=self.user)
        self.foreign = NotificationFactory()

    def test_unread_count_and_mark_read(self):
        self.assertEqual(NotificationService.unread_count(self.user), 2)

        notification = NotificationService.mark_as_read(self.first.pk, self.user)
        self.assertTrue(notification.is_read)
        self.assertEqual(notification.status, Notification.STATUS_READ)
        self.assertEqual(NotificationService.unread_count(self.user), 1)

    def test_cannot_mark_someone_elses_notification(self):
        self.assertIsNone(NotificationService.mark_as_read(self.foreign.pk, self.user))

    def test_mark_all_as_read(self):
        self.assertEqual(NotificationService.mark_all_as_read(self.user), 2)
        self.assertEqual(NotificationService.unread_count(self.user), 0)
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)


class SeedTemplatesCommandTests(TestCase):

    def test_seed_creates_then_updates(self):
        call_command('seed_notification_templates', verbosity=0)
        self.assertEqual(NotificationTemplate.objects.count(), len(DEFAULT_TEMPLATES))

        NotificationTemplate.objects.filter(code='assignments.ended').update(subject='Edited')
        call_command('seed_notification_templates', '--keep-existing', verbosity=0)
        self.assertEqual(NotificationTemplate.objects.get(code='assignments.ended').subject, 'Edited')

        call_command('seed_notification_templates', verbosity=0)
        self.assertNotEqual(NotificationTemplate.objects.get(code='assignments.ended').subject, 'Edited')
