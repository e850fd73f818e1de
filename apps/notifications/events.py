"""
Domain events handed to the notification dispatcher.

Engines build an event inside their transaction and call
``EventPublisher.publish``; delivery runs only after the transaction
commits, so a rolled-back transition never notifies anyone.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from functools import partial
from typing import Any, ClassVar, Dict, Optional, Tuple

from django.db import transaction

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def sensitive(default=None):
    """Field carried in memory for one-time delivery, never stored or logged."""
    return field(default=default, repr=False, compare=False, metadata={'sensitive': True})


@dataclass(frozen=True)
class DomainEvent:
    code: ClassVar[str] = ''
    entity_type: ClassVar[str] = ''
    priority: ClassVar[str] = 'normal'

    recipient_ids: Tuple[Any, ...]

    @property
    def entity_id(self):
        raise NotImplementedError

    def context(self) -> Dict[str, Any]:
        return {
            f.name: _json_safe(getattr(self, f.name))
            for f in fields(self)
            if f.name != 'recipient_ids' and not f.metadata.get('sensitive')
        }

    def sensitive_context(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class SupervisorApproved(DomainEvent):
    code: ClassVar[str] = 'approvals.supervisor_approved'
    entity_type: ClassVar[str] = 'supervisor_record'
    priority: ClassVar[str] = 'high'

    record_id: Any = None
    supervisor_name: str = ''
    supervisor_type: str = ''
    credentials: Optional[Any] = sensitive()

    @property
    def entity_id(self):
        return self.record_id

    def context(self) -> Dict[str, Any]:
        context = super().context()
        if self.credentials is not None:
            context['employee_id'] = self.credentials.employee_id
            context['email'] = self.credentials.email
        return context

    def sensitive_context(self) -> Dict[str, Any]:
        if self.credentials is None:
            return {}
        return {'temporary_password': self.credentials.temporary_password}


@dataclass(frozen=True)
class SupervisorRejected(DomainEvent):
    code: ClassVar[str] = 'approvals.supervisor_rejected'
    entity_type: ClassVar[str] = 'supervisor_record'

    record_id: Any = None
    supervisor_name: str = ''
    supervisor_type: str = ''
    reason: str = ''

    @property
    def entity_id(self):
        return self.record_id


@dataclass(frozen=True)
class AssignmentCreated(DomainEvent):
    code: ClassVar[str] = 'assignments.created'
    entity_type: ClassVar[str] = 'assignment'

    assignment_id: Any = None
    operator_name: str = ''
    beat_code: str = ''
    location_name: str = ''
    supervisor_name: str = ''
    shift_type: str = ''
    start_date: Optional[date] = None

    @property
    def entity_id(self):
        return self.assignment_id


@dataclass(frozen=True)
class AssignmentEnded(DomainEvent):
    code: ClassVar[str] = 'assignments.ended'
    entity_type: ClassVar[str] = 'assignment'

    assignment_id: Any = None
    operator_name: str = ''
    beat_code: str = ''
    end_date: Optional[date] = None

    @property
    def entity_id(self):
        return self.assignment_id


@dataclass(frozen=True)
class AssignmentTransferred(DomainEvent):
    code: ClassVar[str] = 'assignments.transferred'
    entity_type: ClassVar[str] = 'assignment'

    assignment_id: Any = None
    previous_assignment_id: Any = None
    operator_name: str = ''
    beat_code: str = ''
    previous_beat_code: str = ''
    location_name: str = ''
    supervisor_name: str = ''
    transfer_reason: str = ''
    start_date: Optional[date] = None

    @property
    def entity_id(self):
        return self.assignment_id


class EventPublisher:
    """Hands events to the dispatcher once the surrounding transaction commits."""

    @classmethod
    def publish(cls, event: DomainEvent) -> None:
        transaction.on_commit(partial(cls.deliver, event), robust=True)

    @classmethod
    def deliver(cls, event: DomainEvent) -> None:
        from apps.notifications.services import NotificationService

        for recipient_id in dict.fromkeys(event.recipient_ids):
            if recipient_id is None:
                continue
            try:
                NotificationService.notify_event(event, recipient_id)
            except Exception:
                logger.exception(
                    "Event delivery failed code=%s entity_id=%s recipient_id=%s",
                    event.code, event.entity_id, recipient_id,
                )
