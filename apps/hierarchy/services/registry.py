"""
Hierarchy Registry - supervisory records, reporting edges, locations and beats.

Read queries used by the approval and assignment engines, the location
consistency assertion, and the two administrative edge changes
(Supervisor -> General Supervisor, Supervisor -> Location).
"""

import logging

from django.conf import settings
from django.db import transaction

from apps.authentication.models import User
from apps.authentication.services import AccountService
from apps.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from apps.hierarchy.models import Beat, Location, SupervisorRecord

logger = logging.getLogger(__name__)


class HierarchyRegistry:
    ADMIN_ROLES = (User.ROLE_DIRECTOR, User.ROLE_MANAGER)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @classmethod
    def get_supervisor(cls, record_id, for_update=False):
        queryset = SupervisorRecord.objects.select_related('account', 'location', 'general_supervisor')
        if for_update:
            queryset = SupervisorRecord.objects.select_for_update()
        record = queryset.filter(pk=record_id).first()
        if record is None:
            raise NotFoundError('Supervisor', record_id)
        return record

    @classmethod
    def get_location(cls, location_id):
        location = Location.objects.filter(pk=location_id).first()
        if location is None:
            raise NotFoundError('Location', location_id)
        return location

    @classmethod
    def get_beat(cls, beat_id):
        beat = Beat.objects.select_related('location').filter(pk=beat_id).first()
        if beat is None:
            raise NotFoundError('Beat', beat_id)
        return beat

    # ------------------------------------------------------------------
    # Read queries
    # ------------------------------------------------------------------

    @classmethod
    def get_approved_general_supervisors(cls):
        return SupervisorRecord.objects.filter(
            supervisor_type=SupervisorRecord.TYPE_GENERAL_SUPERVISOR,
            approval_status=SupervisorRecord.STATUS_APPROVED,
        ).select_related('account').order_by('account__first_name', 'account__last_name')

    @classmethod
    def get_approved_supervisors(cls, location_id=None):
        queryset = SupervisorRecord.objects.filter(
            supervisor_type=SupervisorRecord.TYPE_SUPERVISOR,
            approval_status=SupervisorRecord.STATUS_APPROVED,
        ).select_related('account', 'location', 'general_supervisor__account')
        if location_id is not None:
            queryset = queryset.filter(location_id=location_id)
        return queryset.order_by('account__first_name', 'account__last_name')

    @classmethod
    def get_supervisors_under(cls, general_supervisor_id):
        record = cls.get_supervisor(general_supervisor_id)
        if not record.is_general_supervisor:
            raise ValidationError({'general_supervisor': 'Record is not a general supervisor'})
        return cls.get_approved_supervisors().filter(general_supervisor=record)

    @classmethod
    def get_beats_by_location(cls, location_id, include_inactive=False):
        location = cls.get_location(location_id)
        queryset = location.beats.all()
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset.order_by('beat_code')

    @classmethod
    def get_active_locations(cls):
        return Location.objects.filter(is_active=True).with_total_beats().order_by('name')

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    @classmethod
    def assert_location_consistency(cls, supervisor_id, location_id):
        """
        Return the supervisor if it may oversee posts at ``location_id``.

        The record must be an APPROVED Supervisor bound to that location or
        bound to no location at all.
        """
        record = cls.get_supervisor(supervisor_id)
        location = cls.get_location(location_id)
        if record.supervisor_type != SupervisorRecord.TYPE_SUPERVISOR:
            raise ValidationError({'supervisor': 'Only supervisors can oversee a beat'})
        if not record.is_approved:
            raise ValidationError({'supervisor': 'Supervisor has not been approved'})
        if record.location_id is not None and record.location_id != location.pk:
            raise ValidationError(
                {'supervisor': 'Supervisor is assigned to a different location than the beat'}
            )
        return record

    @classmethod
    def assert_acyclic(cls, record, new_parent):
        """Walk up from ``new_parent``; reaching ``record`` or exceeding the depth bound is rejected."""
        max_depth = settings.HIERARCHY_MAX_DEPTH
        node = new_parent
        depth = 0
        while node is not None:
            if node.pk == record.pk:
                raise ValidationError({'general_supervisor': 'Reporting line would form a cycle'})
            depth += 1
            if depth > max_depth:
                raise ValidationError(
                    {'general_supervisor': f'Reporting line exceeds {max_depth} levels'}
                )
            node = node.general_supervisor

    # ------------------------------------------------------------------
    # Administrative edge changes
    # ------------------------------------------------------------------

    @classmethod
    def link_general_supervisor(cls, actor, supervisor_id, general_supervisor_id):
        """Point an approved Supervisor at an approved General Supervisor, or detach it with ``None``."""
        actor = cls._resolve_admin(actor)

        with transaction.atomic():
            record = cls._get_approved_for_update(supervisor_id)
            if record.is_general_supervisor:
                raise ValidationError(
                    {'supervisor': 'A general supervisor cannot report to another general supervisor'}
                )

            parent = None
            if general_supervisor_id is not None:
                parent = cls.resolve_general_supervisor(general_supervisor_id)
                cls.assert_acyclic(record, parent)

            record.general_supervisor = parent
            record.save(update_fields=['general_supervisor', 'updated_at'])

        logger.info(
            "supervisor_linked record_id=%s general_supervisor_id=%s actor_id=%s",
            record.pk, general_supervisor_id, actor.pk,
        )
        return record

    @classmethod
    def reassign_supervisor_location(cls, actor, supervisor_record_id, new_location_id):
        """
        Move an approved Supervisor to another location, or unbind it with ``None``.

        Existing assignments keep referencing the record; only future
        assignments are checked against the new location.
        """
        actor = cls._resolve_admin(actor)

        with transaction.atomic():
            record = cls._get_approved_for_update(supervisor_record_id)
            if record.is_general_supervisor:
                raise ValidationError({'location': 'General supervisors are not bound to a location'})

            location = None
            if new_location_id is not None:
                location = cls.get_location(new_location_id)
                if not location.is_active:
                    raise ValidationError({'location': 'Location is inactive'})

            record.location = location
            record.save(update_fields=['location', 'updated_at'])

        logger.info(
            "supervisor_location_changed record_id=%s location_id=%s actor_id=%s",
            record.pk, new_location_id, actor.pk,
        )
        return record

    @classmethod
    def resolve_general_supervisor(cls, general_supervisor_id):
        parent = cls.get_supervisor(general_supervisor_id)
        if not parent.is_general_supervisor:
            raise ValidationError({'general_supervisor': 'Target is not a general supervisor'})
        if not parent.is_approved:
            raise ValidationError({'general_supervisor': 'General supervisor has not been approved'})
        return parent

    @classmethod
    def _resolve_admin(cls, actor):
        actor = AccountService.resolve_actor(actor)
        if actor.role not in cls.ADMIN_ROLES and not actor.is_superuser:
            raise AuthorizationError('Only directors and managers can change the hierarchy')
        return actor

    @classmethod
    def _get_approved_for_update(cls, record_id):
        record = cls.get_supervisor(record_id, for_update=True)
        if not record.is_approved:
            raise InvalidStateError('Only approved records can be reassigned')
        return record
