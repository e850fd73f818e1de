"""
Assignment Engine - places operators on beats under a supervisor.

Every write locks the operator's account row first, so concurrent calls for
the same operator run one after another. The partial unique constraint on
ACTIVE rows is the final guard when that lock is not available.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.assignments.models import Assignment
from apps.authentication.models import User
from apps.authentication.services import AccountService
from apps.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from apps.hierarchy.models import Beat
from apps.hierarchy.services import HierarchyRegistry
from apps.notifications.events import (
    AssignmentCreated,
    AssignmentEnded,
    AssignmentTransferred,
    EventPublisher,
)

logger = logging.getLogger(__name__)


@dataclass
class AssignmentRequest:
    operator_id: str
    beat_id: str
    supervisor_id: str
    shift_type: str = Assignment.SHIFT_DAY
    assignment_type: str = Assignment.TYPE_PERMANENT
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    special_instructions: str = ''
    transfer_reason: str = ''


class AssignmentEngine:
    ASSIGNER_ROLES = (User.ROLE_DIRECTOR, User.ROLE_MANAGER, User.ROLE_GENERAL_SUPERVISOR)

    @classmethod
    def assign(cls, actor, request: AssignmentRequest) -> Assignment:
        """
        Place an operator on a beat.

        An operator that already holds an ACTIVE assignment is moved with
        ``change_assignment`` instead.
        """
        actor = cls._resolve_assigner(actor)
        cls._validate_request(request)

        with transaction.atomic():
            operator = cls._lock_operator(request.operator_id)
            current = cls._current_for_update(operator.pk)
            if current is not None:
                return cls._transfer(actor, operator, current, request)

            beat, supervisor = cls._resolve_placement(request)
            cls._check_capacity(actor, beat)
            assignment = cls._create(actor, operator, beat, supervisor, request)

            EventPublisher.publish(AssignmentCreated(
                recipient_ids=(operator.pk, supervisor.account_id),
                assignment_id=assignment.pk,
                operator_name=operator.full_name,
                beat_code=beat.beat_code,
                location_name=beat.location.name,
                supervisor_name=supervisor.account.full_name,
                shift_type=assignment.get_shift_type_display(),
                start_date=assignment.start_date,
            ))

        logger.info(
            "assignment_created assignment_id=%s operator_id=%s beat_id=%s actor_id=%s",
            assignment.pk, operator.pk, beat.pk, actor.pk,
        )
        return assignment

    @classmethod
    def change_assignment(cls, actor, request: AssignmentRequest) -> Assignment:
        """Replace the operator's ACTIVE assignment in one transaction."""
        actor = cls._resolve_assigner(actor)
        cls._validate_request(request)

        with transaction.atomic():
            operator = cls._lock_operator(request.operator_id)
            current = cls._current_for_update(operator.pk)
            if current is None:
                raise InvalidStateError('Operator has no active assignment to change')
            return cls._transfer(actor, operator, current, request)

    @classmethod
    def unassign(cls, actor, assignment_id, end_date: Optional[date] = None) -> Assignment:
        """
        End an ACTIVE assignment.

        Repeating the call on an assignment that already ended or was
        transferred returns it unchanged.
        """
        actor = cls._resolve_assigner(actor)

        with transaction.atomic():
            assignment = cls.get_assignment(assignment_id)
            if assignment.status in Assignment.TERMINAL_STATUSES:
                logger.info("assignment_unassign_noop assignment_id=%s status=%s", assignment.pk, assignment.status)
                return assignment

            if end_date is None:
                # A future-dated assignment ends on the day it would have started.
                end_date = max(timezone.localdate(), assignment.start_date)
            elif end_date < assignment.start_date:
                raise ValidationError({'end_date': 'End date cannot be before the start date'})

            ended = Assignment.objects.filter(
                pk=assignment.pk, status=Assignment.STATUS_ACTIVE
            ).update(status=Assignment.STATUS_ENDED, end_date=end_date, updated_at=timezone.now())
            if not ended:
                # Ended by a concurrent call.
                return cls.get_assignment(assignment.pk)

            EventPublisher.publish(AssignmentEnded(
                recipient_ids=(assignment.operator_id, assignment.supervisor.account_id),
                assignment_id=assignment.pk,
                operator_name=assignment.operator.full_name,
                beat_code=assignment.beat.beat_code,
                end_date=end_date,
            ))

        logger.info(
            "assignment_ended assignment_id=%s operator_id=%s actor_id=%s",
            assignment.pk, assignment.operator_id, actor.pk,
        )
        return cls.get_assignment(assignment.pk)

    # ------------------------------------------------------------------
    # Read queries
    # ------------------------------------------------------------------

    @classmethod
    def get_assignment(cls, assignment_id):
        assignment = cls._base_queryset().filter(pk=assignment_id).first()
        if assignment is None:
            raise NotFoundError('Assignment', assignment_id)
        return assignment

    @classmethod
    def get_assignments_by_operator(cls, operator_id, status=None):
        AccountService.get_account(operator_id)
        queryset = cls._base_queryset().for_operator(operator_id)
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @classmethod
    def get_assignments_by_beat(cls, beat_id, status=None):
        HierarchyRegistry.get_beat(beat_id)
        queryset = cls._base_queryset().filter(beat_id=beat_id)
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @classmethod
    def get_active_assignment(cls, operator_id):
        return cls._base_queryset().for_operator(operator_id).active().first()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _base_queryset():
        return Assignment.objects.select_related(
            'operator', 'beat', 'location', 'supervisor__account', 'assigned_by'
        )

    @classmethod
    def _resolve_assigner(cls, actor):
        actor = AccountService.resolve_actor(actor)
        if actor.role not in cls.ASSIGNER_ROLES and not actor.is_superuser:
            raise AuthorizationError('Only directors, managers and general supervisors can assign operators')
        return actor

    @staticmethod
    def _validate_request(request: AssignmentRequest):
        errors = {}
        for name in ('operator_id', 'beat_id', 'supervisor_id'):
            if not getattr(request, name):
                errors[name] = 'This field is required.'
        if request.shift_type not in dict(Assignment.SHIFT_CHOICES):
            errors['shift_type'] = f'"{request.shift_type}" is not a valid shift type.'
        if request.assignment_type not in dict(Assignment.TYPE_CHOICES):
            errors['assignment_type'] = f'"{request.assignment_type}" is not a valid assignment type.'
        if request.start_date and request.end_date and request.end_date < request.start_date:
            errors['end_date'] = 'End date cannot be before the start date'
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def _lock_operator(operator_id):
        operator = AccountService.get_account(operator_id, for_update=True)
        if operator.role != User.ROLE_OPERATOR:
            raise ValidationError({'operator_id': 'Account is not an operator'})
        if not operator.is_active:
            raise InvalidStateError('Operator account is not active')
        return operator

    @staticmethod
    def _current_for_update(operator_id):
        return Assignment.objects.select_for_update().filter(
            operator_id=operator_id, status=Assignment.STATUS_ACTIVE
        ).first()

    @staticmethod
    def _resolve_placement(request: AssignmentRequest):
        beat = HierarchyRegistry.get_beat(request.beat_id)
        if not beat.is_active:
            raise ValidationError({'beat_id': 'Beat is inactive'})
        supervisor = HierarchyRegistry.assert_location_consistency(request.supervisor_id, beat.location_id)
        return beat, supervisor

    @staticmethod
    def _check_capacity(actor, beat, replacing=None):
        if not settings.ENFORCE_BEAT_CAPACITY:
            return
        if actor.is_superuser or actor.role in settings.BEAT_CAPACITY_OVERRIDE_ROLES:
            return
        # Concurrent assigns to the same beat count one after another.
        beat = Beat.objects.select_for_update().get(pk=beat.pk)
        occupied = Assignment.objects.active().filter(beat=beat)
        if replacing is not None:
            occupied = occupied.exclude(pk=replacing.pk)
        if occupied.count() >= beat.number_of_operators:
            raise ConflictError(
                f"Beat {beat.beat_code} already has {beat.number_of_operators} operator(s) assigned",
                details={'beat_id': str(beat.pk), 'capacity': beat.number_of_operators},
            )

    @staticmethod
    def _create(actor, operator, beat, supervisor, request: AssignmentRequest, replaces=None):
        try:
            with transaction.atomic():
                return Assignment.objects.create(
                    operator=operator,
                    beat=beat,
                    supervisor=supervisor,
                    location_id=beat.location_id,
                    shift_type=request.shift_type,
                    assignment_type=request.assignment_type,
                    start_date=request.start_date or timezone.localdate(),
                    end_date=request.end_date,
                    special_instructions=request.special_instructions.strip(),
                    transfer_reason=request.transfer_reason.strip() if replaces else '',
                    replaces=replaces,
                    assigned_by=actor,
                )
        except IntegrityError:
            raise ConflictError('Operator already holds an active assignment')

    @classmethod
    def _transfer(cls, actor, operator, current, request: AssignmentRequest) -> Assignment:
        # Caller holds the operator lock inside an open transaction.
        beat, supervisor = cls._resolve_placement(request)
        cls._check_capacity(actor, beat, replacing=current)

        start_date = request.start_date or timezone.localdate()
        if start_date < current.start_date:
            raise ValidationError({'start_date': 'New assignment cannot start before the current one'})

        transferred = Assignment.objects.filter(
            pk=current.pk, status=Assignment.STATUS_ACTIVE
        ).update(status=Assignment.STATUS_TRANSFERRED, end_date=start_date, updated_at=timezone.now())
        if not transferred:
            raise InvalidStateError('Current assignment changed while it was being transferred')

        request = replace(request, start_date=start_date)
        assignment = cls._create(actor, operator, beat, supervisor, request, replaces=current)

        previous_supervisor_account = current.supervisor.account_id
        EventPublisher.publish(AssignmentTransferred(
            recipient_ids=(operator.pk, supervisor.account_id, previous_supervisor_account),
            assignment_id=assignment.pk,
            previous_assignment_id=current.pk,
            operator_name=operator.full_name,
            beat_code=beat.beat_code,
            previous_beat_code=current.beat.beat_code,
            location_name=beat.location.name,
            supervisor_name=supervisor.account.full_name,
            transfer_reason=assignment.transfer_reason,
            start_date=assignment.start_date,
        ))

        logger.info(
            "assignment_transferred assignment_id=%s previous_id=%s operator_id=%s actor_id=%s",
            assignment.pk, current.pk, operator.pk, actor.pk,
        )
        return assignment
