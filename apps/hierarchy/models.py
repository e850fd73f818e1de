"""Hierarchy Models - Locations, beats and supervisory records"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Count, Q

from apps.core.models import TimeStampedModel, WorkforceEntity


class LocationQuerySet(models.QuerySet):

    def with_total_beats(self):
        return self.annotate(
            beat_count=Count('beats', filter=Q(beats__is_active=True), distinct=True)
        )


class Location(WorkforceEntity):
    """Physical site guarded by the workforce"""

    name = models.CharField(max_length=150, unique=True)
    address = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    objects = LocationQuerySet.as_manager()

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def total_beats(self):
        annotated = getattr(self, 'beat_count', None)
        if annotated is not None:
            return annotated
        return self.beats.filter(is_active=True).count()


class Beat(WorkforceEntity):
    """Security post; always owned by exactly one Location"""

    beat_code = models.CharField(max_length=30, unique=True)
    name = models.CharField(max_length=150, blank=True)
    description = models.TextField(blank=True)
    number_of_operators = models.PositiveIntegerField(default=1)
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name='beats')
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ['beat_code']
        indexes = [
            models.Index(fields=['location', 'is_active'], name='beat_location_active_idx'),
        ]

    def __str__(self):
        return self.beat_code


class SupervisorRecord(TimeStampedModel):
    """
    General Supervisor or Supervisor registration.

    Created PENDING at submission and decided exactly once. APPROVED records
    can later have their reporting line and location changed administratively.
    """

    TYPE_GENERAL_SUPERVISOR = 'general_supervisor'
    TYPE_SUPERVISOR = 'supervisor'

    TYPE_CHOICES = [
        (TYPE_GENERAL_SUPERVISOR, 'General Supervisor'),
        (TYPE_SUPERVISOR, 'Supervisor'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    TERMINAL_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='supervisor_record'
    )
    supervisor_type = models.CharField(max_length=30, choices=TYPE_CHOICES, db_index=True)
    approval_status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True
    )
    registered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='submitted_registrations'
    )

    general_supervisor = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='supervisors'
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='supervisors'
    )
    region_assigned = models.CharField(max_length=150, blank=True)
    start_date = models.DateField(null=True, blank=True)

    # Decision
    rejection_reason = models.TextField(blank=True)
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='decided_registrations'
    )
    decided_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['supervisor_type', 'approval_status'], name='supervisor_type_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(supervisor_type='supervisor') | Q(general_supervisor__isnull=True),
                name='general_supervisor_only_for_supervisors',
            ),
            models.CheckConstraint(
                condition=Q(supervisor_type='supervisor') | Q(location__isnull=True),
                name='location_only_for_supervisors',
            ),
            models.CheckConstraint(
                condition=Q(supervisor_type='general_supervisor') | Q(region_assigned=''),
                name='region_only_for_general_supervisors',
            ),
            models.CheckConstraint(
                condition=Q(approval_status='rejected') | Q(rejection_reason=''),
                name='rejection_reason_only_when_rejected',
            ),
        ]

    def __str__(self):
        return f"{self.get_supervisor_type_display()}: {self.account.full_name}"

    @property
    def is_general_supervisor(self):
        return self.supervisor_type == self.TYPE_GENERAL_SUPERVISOR

    @property
    def is_approved(self):
        return self.approval_status == self.STATUS_APPROVED
