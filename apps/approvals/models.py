"""Approval Models - decision audit trail for supervisory registrations"""
import uuid

from django.conf import settings
from django.db import models

from apps.hierarchy.models import SupervisorRecord


APPROVAL_ACTION_CHOICES = [
    ('submitted', 'Submitted'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
]


class ApprovalAction(models.Model):
    """Append-only log of every submission and decision"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    record = models.ForeignKey(SupervisorRecord, on_delete=models.PROTECT, related_name='actions')
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='approval_actions'
    )
    action = models.CharField(max_length=20, choices=APPROVAL_ACTION_CHOICES)
    comments = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['record', 'created_at'], name='approval_action_record_idx'),
        ]

    def __str__(self):
        return f"{self.record_id} - {self.action}"
