"""Notification Models"""
import uuid

from django.db import models
from django.utils import timezone

from apps.core.models import TimeStampedModel


CHANNEL_CHOICES = [
    ('in_app', 'In App'),
    ('email', 'Email'),
    ('push', 'Push'),
]


class NotificationTemplate(TimeStampedModel):
    """Subject/body Django-template strings keyed by event code"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=50, unique=True)

    subject = models.CharField(max_length=255)
    body = models.TextField()

    channel = models.CharField(max_length=20, choices=CHANNEL_CHOICES, default='in_app')
    variables = models.JSONField(default=list, blank=True)  # e.g., ['supervisor_name', 'beat_code']
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.channel})"


class Notification(TimeStampedModel):
    """Inbox entry for one recipient of one domain event"""

    STATUS_PENDING = 'pending'
    STATUS_SENT = 'sent'
    STATUS_READ = 'read'
    STATUS_FAILED = 'failed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SENT, 'Sent'),
        (STATUS_READ, 'Read'),
        (STATUS_FAILED, 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )

    template = models.ForeignKey(NotificationTemplate, on_delete=models.SET_NULL, null=True, blank=True)
    event_code = models.CharField(max_length=50, db_index=True)
    channel = models.CharField(max_length=20, choices=CHANNEL_CHOICES, default='in_app')

    subject = models.CharField(max_length=255)
    body = models.TextField()

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    priority = models.CharField(max_length=10, choices=[
        ('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('critical', 'Critical')
    ], default='normal')
    metadata = models.JSONField(default=dict, blank=True)
    # Body was rendered without the sensitive values that were e-mailed once.
    redacted = models.BooleanField(default=False)
    delivery_attempts = models.PositiveSmallIntegerField(default=0)

    sent_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)

    # Reference to entity
    entity_type = models.CharField(max_length=50, blank=True)
    entity_id = models.UUIDField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'status'], name='notification_recipient_idx'),
        ]

    def __str__(self):
        return f"{self.recipient_id} - {self.subject[:50]}"

    @property
    def is_read(self):
        return self.read_at is not None

    def mark_sent(self):
        self.status = self.STATUS_SENT
        self.sent_at = timezone.now()
        self.save(update_fields=['status', 'sent_at', 'updated_at'])

    def mark_failed(self, reason: str = ''):
        self.status = self.STATUS_FAILED
        self.metadata = {**self.metadata, 'last_error': reason}
        self.save(update_fields=['status', 'metadata', 'updated_at'])

    def mark_read(self):
        self.status = self.STATUS_READ
        self.read_at = timezone.now()
        self.save(update_fields=['status', 'read_at', 'updated_at'])
