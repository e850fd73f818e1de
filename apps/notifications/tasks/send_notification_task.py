"""Celery task to deliver notifications"""
from __future__ import annotations

from celery import shared_task

from apps.notifications.models import Notification


@shared_task(bind=True, name='notifications.send_notification', ignore_result=True)
def send_notification_task(self, notification_id: str):
    from apps.notifications.services.notification_service import NotificationService

    notification = (
        Notification.objects.select_related('recipient')
        .filter(id=notification_id, redacted=False)
        .exclude(status__in=[Notification.STATUS_SENT, Notification.STATUS_READ])
        .first()
    )
    if not notification:
        return

    NotificationService.dispatch_immediately(notification)
