"""Notification orchestration services"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from apps.authentication.models import User
from apps.notifications.defaults import DEFAULT_TEMPLATES_BY_CODE, REDACTED_PLACEHOLDER
from apps.notifications.models import Notification, NotificationTemplate
from .notification_router import NotificationRouter
from .template_renderer import RenderedNotification, TemplateRenderer

logger = logging.getLogger(__name__)


class NotificationService:
    """High-level orchestration for notification workflows."""

    renderer = TemplateRenderer()
    router = NotificationRouter()

    # --------------------------------------------------------------------- API
    @classmethod
    def notify_event(cls, event, recipient_id) -> Notification | None:
        """Persist and deliver the inbox entry for one recipient of a domain event."""
        recipient = User.objects.filter(pk=recipient_id).first()
        if recipient is None:
            logger.warning("Notification recipient missing code=%s recipient_id=%s", event.code, recipient_id)
            return None

        return cls.notify(
            recipient=recipient,
            template_code=event.code,
            context=event.context(),
            sensitive_context=event.sensitive_context(),
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            priority=event.priority,
        )

    @classmethod
    def notify(
        cls,
        *,
        recipient: User,
        template_code: str,
        context: Dict[str, Any] | None = None,
        sensitive_context: Dict[str, Any] | None = None,
        entity_type: str = '',
        entity_id=None,
        priority: str = 'normal',
    ) -> Notification:
        """
        Store one notification and hand it to the router.

        Values in ``sensitive_context`` are rendered only into the copy that
        is delivered synchronously; the stored row carries a placeholder.
        """
        context = context or {}
        template = cls._get_template(template_code)

        stored_context = {**context, **{key: REDACTED_PLACEHOLDER for key in (sensitive_context or {})}}
        stored = cls.renderer.render(template, context=stored_context)

        notification = Notification.objects.create(
            recipient=recipient,
            template=None if template._state.adding else template,
            event_code=template_code,
            channel=template.channel,
            subject=stored.subject,
            body=stored.body,
            priority=priority,
            metadata={
                'context': context,
                'missing_variables': stored.missing_variables,
            },
            redacted=bool(sensitive_context),
            entity_type=entity_type or '',
            entity_id=entity_id,
        )

        if sensitive_context:
            content = cls.renderer.render(template, context={**context, **sensitive_context})
            cls.router.dispatch(notification, content)
        else:
            cls._queue_delivery(notification)

        return notification

    @classmethod
    def dispatch_immediately(cls, notification: Notification) -> bool:
        return cls.router.dispatch(notification)

    @classmethod
    def retry_failed(cls) -> Dict[str, int]:
        """Re-dispatch failed rows, and pending rows whose queueing was lost."""
        max_attempts = settings.NOTIFICATION_MAX_ATTEMPTS
        stale_before = timezone.now() - timedelta(minutes=10)
        candidates = (
            Notification.objects.filter(redacted=False, delivery_attempts__lt=max_attempts)
            .filter(
                Q(status=Notification.STATUS_FAILED)
                | Q(status=Notification.STATUS_PENDING, created_at__lt=stale_before)
            )
            .select_related('recipient')
            .order_by('created_at')
        )
        retried = succeeded = 0
        for notification in candidates:
            retried += 1
            if cls.router.dispatch(notification):
                succeeded += 1
        if retried:
            logger.info("Notification retry pass retried=%s succeeded=%s", retried, succeeded)
        return {'retried': retried, 'succeeded': succeeded}

    # ------------------------------------------------------------------ Inbox
    @classmethod
    def inbox(cls, user):
        if not user or not user.is_authenticated:
            return Notification.objects.none()
        return Notification.objects.filter(recipient=user)

    @classmethod
    def mark_as_read(cls, notification_id, user) -> Notification | None:
        notification = cls.inbox(user).filter(id=notification_id).first()
        if not notification:
            return None
        if not notification.is_read:
            notification.mark_read()
        return notification

    @classmethod
    def mark_all_as_read(cls, user) -> int:
        return cls.inbox(user).filter(read_at__isnull=True).update(
            status=Notification.STATUS_READ,
            read_at=timezone.now(),
            updated_at=timezone.now(),
        )

    @classmethod
    def unread_count(cls, user) -> int:
        return cls.inbox(user).filter(read_at__isnull=True).count()

    # --------------------------------------------------------------- Internals
    @staticmethod
    def _get_template(template_code: str) -> NotificationTemplate:
        template = NotificationTemplate.objects.filter(code=template_code, is_active=True).first()
        if template is not None:
            return template
        defaults = DEFAULT_TEMPLATES_BY_CODE.get(template_code)
        if defaults is None:
            raise LookupError(f"No notification template for {template_code}")
        # Unsaved instance; never persisted from here.
        return NotificationTemplate(**defaults)

    @classmethod
    def _queue_delivery(cls, notification: Notification) -> None:
        from apps.notifications.tasks import send_notification_task

        try:
            send_notification_task.delay(notification_id=str(notification.id))
        except Exception:
            # Row stays pending and is picked up by the retry pass.
            logger.exception("Could not queue notification id=%s", notification.id)
