"""
Assignment Models - operator to beat placements
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.core.exceptions import InvalidStateError
from apps.core.models import TimeStampedModel
from apps.hierarchy.models import Beat, Location, SupervisorRecord


class AssignmentQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Assignment.STATUS_ACTIVE)

    def for_operator(self, operator_id):
        return self.filter(operator_id=operator_id)


class Assignment(TimeStampedModel):
    """
    Binds one operator to one beat under one supervisor.

    ``location`` is always copied from the beat. An operator holds at most
    one ACTIVE row; the partial unique constraint below backs that up at the
    database level. Rows are never deleted: they end or are transferred.
    """

    SHIFT_DAY = 'day'
    SHIFT_NIGHT = 'night'
    SHIFT_ROTATING = 'rotating'

    SHIFT_CHOICES = [
        (SHIFT_DAY, 'Day'),
        (SHIFT_NIGHT, 'Night'),
        (SHIFT_ROTATING, 'Rotating'),
    ]

    TYPE_PERMANENT = 'permanent'
    TYPE_TEMPORARY = 'temporary'
    TYPE_RELIEF = 'relief'

    TYPE_CHOICES = [
        (TYPE_PERMANENT, 'Permanent'),
        (TYPE_TEMPORARY, 'Temporary'),
        (TYPE_RELIEF, 'Relief'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_ENDED = 'ended'
    STATUS_TRANSFERRED = 'transferred'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_ENDED, 'Ended'),
        (STATUS_TRANSFERRED, 'Transferred'),
    ]

    TERMINAL_STATUSES = (STATUS_ENDED, STATUS_TRANSFERRED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    operator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='assignments'
    )
    beat = models.ForeignKey(Beat, on_delete=models.PROTECT, related_name='assignments')
    supervisor = models.ForeignKey(
        SupervisorRecord,
        on_delete=models.PROTECT,
        related_name='assignments'
    )
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name='assignments')

    shift_type = models.CharField(max_length=20, choices=SHIFT_CHOICES, default=SHIFT_DAY)
    assignment_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_PERMANENT)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    special_instructions = models.TextField(blank=True)
    transfer_reason = models.TextField(blank=True)

    replaces = models.OneToOneField(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='replaced_by'
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='assignments_made'
    )

    objects = AssignmentQuerySet.as_manager()

    class Meta:
        ordering = ['-start_date', '-created_at']
        indexes = [
            models.Index(fields=['operator', 'status'], name='assignment_operator_idx'),
            models.Index(fields=['beat', 'status'], name='assignment_beat_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['operator'],
                condition=Q(status='active'),
                name='one_active_assignment_per_operator',
            ),
        ]

    def __str__(self):
        return f"{self.operator_id} -> {self.beat_id} ({self.status})"

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def delete(self, *args, **kwargs):
        raise InvalidStateError('Assignments cannot be deleted; unassign them instead.')
