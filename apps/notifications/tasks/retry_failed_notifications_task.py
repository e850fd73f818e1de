"""Periodic out-of-band retry for notifications that failed to deliver"""
from __future__ import annotations

from celery import shared_task


@shared_task(name='notifications.retry_failed', ignore_result=True)
def retry_failed_notifications():
    from apps.notifications.services.notification_service import NotificationService

    return NotificationService.retry_failed()
