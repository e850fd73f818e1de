"""Supervisory registration approval workflow"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.approvals.models import ApprovalAction
from apps.authentication.models import User
from apps.authentication.services import AccountService
from apps.core.exceptions import ConflictError, InvalidStateError, ValidationError
from apps.hierarchy.models import SupervisorRecord
from apps.hierarchy.services import HierarchyRegistry
from apps.notifications.events import EventPublisher, SupervisorApproved, SupervisorRejected
from .authorization import ACCOUNT_ROLE_FOR_TYPE, ApprovalAuthorization
from .credential_issuer import CredentialIssuer, Credentials

logger = logging.getLogger(__name__)

DECISION_APPROVE = 'approve'
DECISION_REJECT = 'reject'


@dataclass
class RegistrationPayload:
    supervisor_type: str
    first_name: str
    last_name: str
    email: str
    phone: str = ''
    address: str = ''
    region_assigned: str = ''
    location_id: Optional[str] = None
    general_supervisor_id: Optional[str] = None
    start_date: Optional[date] = None


@dataclass
class ApprovalDecision:
    record: SupervisorRecord
    credentials: Optional[Credentials] = None


class ApprovalEngine:
    """PENDING -> APPROVED | REJECTED, decided exactly once."""

    @classmethod
    def submit_registration(cls, submitter, payload: RegistrationPayload) -> SupervisorRecord:
        submitter = AccountService.resolve_actor(submitter)
        if payload.supervisor_type not in ACCOUNT_ROLE_FOR_TYPE:
            raise ValidationError({'supervisor_type': 'Unknown supervisor type'})
        ApprovalAuthorization.ensure_can_submit(submitter, payload.supervisor_type)
        cls._validate_payload(payload)

        with transaction.atomic():
            cls._ensure_unique_identity(payload)
            location, general_supervisor = cls._resolve_placement(submitter, payload)

            try:
                with transaction.atomic():
                    account = User.objects.create_user(
                        email=payload.email,
                        password=None,
                        first_name=payload.first_name.strip(),
                        last_name=payload.last_name.strip(),
                        phone=payload.phone,
                        address=payload.address,
                        role=ACCOUNT_ROLE_FOR_TYPE[payload.supervisor_type],
                        status=User.STATUS_PENDING,
                        registered_by=submitter,
                    )
            except IntegrityError:
                raise ConflictError('An account with this email or phone already exists')

            record = SupervisorRecord.objects.create(
                account=account,
                supervisor_type=payload.supervisor_type,
                registered_by=submitter,
                general_supervisor=general_supervisor,
                location=location,
                region_assigned=payload.region_assigned.strip(),
                start_date=payload.start_date,
            )
            ApprovalAction.objects.create(record=record, actor=submitter, action='submitted')

        logger.info(
            "registration_submitted record_id=%s type=%s submitter_id=%s",
            record.pk, record.supervisor_type, submitter.pk,
        )
        return record

    @classmethod
    def decide(cls, approver, record_id, decision: str, reason: Optional[str] = None) -> ApprovalDecision:
        approver = AccountService.resolve_actor(approver)
        decision = (decision or '').strip().lower()
        if decision not in (DECISION_APPROVE, DECISION_REJECT):
            raise ValidationError({'decision': 'Decision must be approve or reject'})

        record = HierarchyRegistry.get_supervisor(record_id)
        ApprovalAuthorization.ensure_can_decide(approver, record.supervisor_type)
        if record.approval_status != SupervisorRecord.STATUS_PENDING:
            raise InvalidStateError(f"Registration is already {record.approval_status}")

        reason = (reason or '').strip()
        if decision == DECISION_REJECT and not reason:
            raise ValidationError({'reason': 'A reason is required when rejecting'})

        new_status = (
            SupervisorRecord.STATUS_APPROVED if decision == DECISION_APPROVE
            else SupervisorRecord.STATUS_REJECTED
        )

        credentials = None
        with transaction.atomic():
            now = timezone.now()
            claimed = SupervisorRecord.objects.filter(
                pk=record.pk, approval_status=SupervisorRecord.STATUS_PENDING
            ).update(
                approval_status=new_status,
                decided_by=approver,
                decided_at=now,
                rejection_reason=reason if decision == DECISION_REJECT else '',
                updated_at=now,
            )
            if not claimed:
                raise InvalidStateError('Registration has already been decided')

            if decision == DECISION_APPROVE:
                credentials = CredentialIssuer.issue(record.account_id)
                activated = User.objects.filter(
                    pk=record.account_id, status=User.STATUS_PENDING
                ).update(status=User.STATUS_ACTIVE, updated_at=now)
                if not activated:
                    raise InvalidStateError('Registered account is no longer pending')
                event = SupervisorApproved(
                    recipient_ids=(record.registered_by_id,),
                    record_id=record.pk,
                    supervisor_name=record.account.full_name,
                    supervisor_type=record.get_supervisor_type_display(),
                    credentials=credentials,
                )
            else:
                event = SupervisorRejected(
                    recipient_ids=(record.registered_by_id,),
                    record_id=record.pk,
                    supervisor_name=record.account.full_name,
                    supervisor_type=record.get_supervisor_type_display(),
                    reason=reason,
                )

            ApprovalAction.objects.create(
                record=record,
                actor=approver,
                action='approved' if decision == DECISION_APPROVE else 'rejected',
                comments=reason,
            )
            EventPublisher.publish(event)

        logger.info(
            "registration_decided record_id=%s status=%s approver_id=%s",
            record.pk, new_status, approver.pk,
        )
        record = HierarchyRegistry.get_supervisor(record.pk)
        return ApprovalDecision(record=record, credentials=credentials)

    @classmethod
    def list_pending(cls, approver_role: str):
        """Pending registrations the given role is allowed to decide."""
        return SupervisorRecord.objects.filter(
            approval_status=SupervisorRecord.STATUS_PENDING,
            supervisor_type__in=ApprovalAuthorization.decidable_types(approver_role),
        ).select_related('account', 'registered_by', 'location', 'general_supervisor__account').order_by('created_at')

    @classmethod
    def get_approval_stats(cls):
        """Counts recomputed from record state on every call."""
        today_start = timezone.make_aware(datetime.combine(timezone.localdate(), time.min))
        week_start = today_start - timedelta(days=today_start.weekday())

        pending = Q(approval_status=SupervisorRecord.STATUS_PENDING)
        approved = Q(approval_status=SupervisorRecord.STATUS_APPROVED)
        rejected = Q(approval_status=SupervisorRecord.STATUS_REJECTED)
        general = Q(supervisor_type=SupervisorRecord.TYPE_GENERAL_SUPERVISOR)
        supervisor = Q(supervisor_type=SupervisorRecord.TYPE_SUPERVISOR)

        return SupervisorRecord.objects.aggregate(
            total=Count('id'),
            pending=Count('id', filter=pending),
            approved=Count('id', filter=approved),
            rejected=Count('id', filter=rejected),
            pending_general_supervisor=Count('id', filter=pending & general),
            pending_supervisor=Count('id', filter=pending & supervisor),
            approved_general_supervisor=Count('id', filter=approved & general),
            approved_supervisor=Count('id', filter=approved & supervisor),
            approved_today=Count('id', filter=approved & Q(decided_at__gte=today_start)),
            rejected_today=Count('id', filter=rejected & Q(decided_at__gte=today_start)),
            approved_this_week=Count('id', filter=approved & Q(decided_at__gte=week_start)),
        )

    # ------------------------------------------------------------------ internals
    @staticmethod
    def _validate_payload(payload: RegistrationPayload):
        errors = {}
        for name in ('first_name', 'last_name', 'email'):
            if not (getattr(payload, name) or '').strip():
                errors[name] = 'This field is required.'

        if payload.supervisor_type == SupervisorRecord.TYPE_GENERAL_SUPERVISOR:
            if payload.location_id:
                errors['location_id'] = 'General supervisors are not bound to a location.'
            if payload.general_supervisor_id:
                errors['general_supervisor_id'] = 'General supervisors do not report to a general supervisor.'
        elif payload.region_assigned:
            errors['region_assigned'] = 'Only general supervisors are assigned a region.'

        if errors:
            raise ValidationError(errors)

    @staticmethod
    def _ensure_unique_identity(payload: RegistrationPayload):
        if User.objects.filter(email__iexact=payload.email.strip()).exists():
            raise ConflictError('An account with this email already exists')
        if payload.phone and User.objects.filter(phone=payload.phone).exists():
            raise ConflictError('An account with this phone number already exists')

    @staticmethod
    def _resolve_placement(submitter, payload: RegistrationPayload):
        if payload.supervisor_type != SupervisorRecord.TYPE_SUPERVISOR:
            return None, None

        location = None
        if payload.location_id:
            location = HierarchyRegistry.get_location(payload.location_id)
            if not location.is_active:
                raise ValidationError({'location_id': 'Location is inactive.'})

        if payload.general_supervisor_id:
            general_supervisor = HierarchyRegistry.resolve_general_supervisor(payload.general_supervisor_id)
        else:
            # Defaults to the submitting general supervisor's own record.
            general_supervisor = SupervisorRecord.objects.filter(
                account=submitter,
                supervisor_type=SupervisorRecord.TYPE_GENERAL_SUPERVISOR,
                approval_status=SupervisorRecord.STATUS_APPROVED,
            ).first()
        return location, general_supervisor
