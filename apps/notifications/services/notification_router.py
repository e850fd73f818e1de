"""Channel routing for notifications"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import EmailMessage, get_connection
from django.utils import timezone

from apps.notifications.models import Notification
from .template_renderer import RenderedNotification

logger = logging.getLogger(__name__)


class NotificationRouter:
    """Route notifications to appropriate delivery channels."""

    def __init__(self) -> None:
        self.channel_handlers: Dict[str, Callable[[Notification, RenderedNotification], None]] = {
            'in_app': self._send_in_app,
            'email': self._send_email,
            'push': self._send_push,
        }

    def dispatch(self, notification: Notification, content: RenderedNotification | None = None) -> bool:
        """
        Deliver one notification. ``content`` overrides the stored subject/body
        for a one-time delivery of values the row does not keep.

        Failures are recorded on the row and never raised.
        """
        content = content or RenderedNotification(subject=notification.subject, body=notification.body)
        handler = self.channel_handlers.get(notification.channel, self._send_in_app)
        notification.delivery_attempts += 1
        notification.save(update_fields=['delivery_attempts', 'updated_at'])
        try:
            handler(notification, content)
        except Exception as exc:
            logger.warning(
                "Notification delivery failed id=%s channel=%s attempt=%s error=%s",
                notification.id, notification.channel, notification.delivery_attempts,
                exc.__class__.__name__,
            )
            notification.mark_failed(exc.__class__.__name__)
            return False

        notification.mark_sent()
        self._push_realtime(notification)
        return True

    # Channel implementations -------------------------------------------------
    def _send_in_app(self, notification: Notification, content: RenderedNotification) -> None:
        # In-app notifications live within the database; realtime push covers UX.
        return None

    def _send_email(self, notification: Notification, content: RenderedNotification) -> None:
        recipient_email = notification.recipient.email
        if not recipient_email:
            raise ValueError('Recipient has no email address')
        connection = get_connection(timeout=settings.EMAIL_TIMEOUT)
        EmailMessage(
            subject=content.subject,
            body=content.body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[recipient_email],
            connection=connection,
        ).send(fail_silently=False)

    def _send_push(self, notification: Notification, content: RenderedNotification) -> None:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        async_to_sync(channel_layer.group_send)(
            f"push_{notification.recipient_id}",
            {
                'type': 'broadcast.notification',
                'event': 'notification.push',
                'payload': self._serialize(notification),
            },
        )

    # Helpers -----------------------------------------------------------------
    def _push_realtime(self, notification: Notification) -> None:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        try:
            async_to_sync(channel_layer.group_send)(
                f"notifications_{notification.recipient_id}",
                {
                    'type': 'broadcast.notification',
                    'event': 'notification.update',
                    'payload': self._serialize(notification),
                },
            )
        except Exception:
            logger.warning("Realtime push failed id=%s", notification.id, exc_info=True)

    def _serialize(self, notification: Notification) -> Dict[str, Any]:
        return {
            'id': str(notification.id),
            'event_code': notification.event_code,
            'subject': notification.subject,
            'body': notification.body,
            'status': notification.status,
            'channel': notification.channel,
            'priority': notification.priority,
            'sent_at': notification.sent_at.isoformat() if notification.sent_at else None,
            'entity_type': notification.entity_type,
            'entity_id': str(notification.entity_id) if notification.entity_id else None,
            'recipient_id': str(notification.recipient_id),
            'timestamp': timezone.now().isoformat(),
        }
